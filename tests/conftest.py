from __future__ import annotations

import json

import pytest
import requests
from requests.cookies import RequestsCookieJar
from requests.structures import CaseInsensitiveDict

from poe_power.directory import SwitchDirectory
from poe_power.handler import DeviceControlAdapter
from poe_power.memory_client import InMemoryControllerClient
from poe_power.models import (
    ManagedDevice,
    ManagedFleet,
    ManagedMachine,
    PoeMode,
    RemoteDevice,
    RemotePort,
)
from poe_power.service import PowerService

DEVICE_MAC = "00:00:00:00:00:00"
DEVICE_ID = "device-id"
SYSTEM_ID = "system-id"
MACHINE_PORT = 1


def make_response(status: int = 200, body: object = None, url: str = "https://unifi.test/") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.reason = "OK" if status < 400 else "Error"
    resp.url = url
    resp._content = json.dumps(body).encode("utf-8") if body is not None else b""
    return resp


class StubSession:
    """Records requests and replays canned responses, keyed by (method, url)."""

    def __init__(self):
        self.headers = CaseInsensitiveDict()
        self.cookies = RequestsCookieJar()
        self.calls = []
        self.responses = {}

    def respond(self, method: str, url: str, response):
        self.responses[(method, url)] = response

    def _dispatch(self, method: str, url: str, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.get((method, url))
        if response is None:
            return make_response(404, {"meta": {"rc": "error"}, "data": []}, url)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, **kwargs):
        return self._dispatch("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._dispatch("POST", url, **kwargs)


@pytest.fixture
def stub_session() -> StubSession:
    return StubSession()


@pytest.fixture
def fleet() -> ManagedFleet:
    return ManagedFleet(
        devices=(
            ManagedDevice(
                address=DEVICE_MAC,
                machines=(ManagedMachine(external_id=SYSTEM_ID, port_index=MACHINE_PORT),),
            ),
        )
    )


def remote_device(mode=PoeMode.AUTO, port=MACHINE_PORT) -> RemoteDevice:
    return RemoteDevice(
        address=DEVICE_MAC,
        controller_handle=DEVICE_ID,
        ports=[RemotePort(index=port, power_mode=mode)],
    )


@pytest.fixture
def controller() -> InMemoryControllerClient:
    return InMemoryControllerClient([remote_device()])


@pytest.fixture
def adapter(fleet, controller) -> DeviceControlAdapter:
    return DeviceControlAdapter(fleet, SwitchDirectory(controller), controller)


@pytest.fixture
def service(adapter) -> PowerService:
    return PowerService(adapter)
