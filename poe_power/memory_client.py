"""In-memory stand-in for the controller, used by tests and the `controller.fake` mode."""

import copy
import logging
from typing import List, Optional, Sequence, Tuple

import requests

from .models import ControllerResponse, PoeMode, RemoteDevice, RemotePort
from .unifi_client import ControllerClient

logger = logging.getLogger(__name__)


class InMemoryControllerClient(ControllerClient):
    """
    Serves a fixed device list and applies port overrides to it.

    fail_devices / fail_writes make the matching calls raise the same
    requests exceptions the live client would.
    """

    def __init__(
        self,
        devices: Sequence[RemoteDevice] = (),
        *,
        fail_login: bool = False,
        fail_devices: Optional[Exception] = None,
        fail_writes: Optional[Exception] = None,
    ):
        self._devices: List[RemoteDevice] = [copy.deepcopy(d) for d in devices]
        self.fail_login = fail_login
        self.fail_devices = fail_devices
        self.fail_writes = fail_writes
        self.logged_in_as: Optional[str] = None
        self.list_calls = 0
        self.writes: List[Tuple[str, int, PoeMode]] = []

    def login(self, username: str, password: str) -> None:
        if self.fail_login:
            raise requests.HTTPError("401 Client Error: Unauthorized for url: /api/login")
        self.logged_in_as = username

    def devices(self) -> ControllerResponse[List[RemoteDevice]]:
        self.list_calls += 1
        if self.fail_devices is not None:
            raise self.fail_devices
        return ControllerResponse(rc="ok", data=copy.deepcopy(self._devices))

    def _write(self, device_id: str, port_idx: int, mode: PoeMode) -> None:
        self.writes.append((device_id, port_idx, mode))
        if self.fail_writes is not None:
            raise self.fail_writes
        for device in self._devices:
            if device.controller_handle != device_id:
                continue
            port = device.port(port_idx)
            if port is None:
                device.ports.append(RemotePort(index=port_idx, power_mode=mode))
            else:
                port.power_mode = mode
            logger.debug("Fake controller: %s port %s -> %s", device_id, port_idx, mode.value)
            return
        raise requests.HTTPError(f"404 Client Error: Not Found for url: /rest/device/{device_id}")

    def power_on(self, device_id: str, port_idx: int) -> None:
        self._write(device_id, port_idx, PoeMode.AUTO)

    def power_off(self, device_id: str, port_idx: int) -> None:
        self._write(device_id, port_idx, PoeMode.OFF)
