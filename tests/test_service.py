"""Tests for the mediation facade."""

import requests

from poe_power.directory import SwitchDirectory
from poe_power.handler import DeviceControlAdapter
from poe_power.memory_client import InMemoryControllerClient
from poe_power.service import PowerService

from .conftest import SYSTEM_ID, remote_device


def test_status_success(service):
    result = service.get_power_status(SYSTEM_ID)
    assert result.ok
    assert result.to_response() == ({"status": "running"}, 200)


def test_power_on_success(service):
    result = service.power_on(SYSTEM_ID)
    assert result.ok
    assert result.to_response() == ({}, 200)


def test_unknown_machine_is_a_tagged_failure(service):
    result = service.power_on("unknown-id")
    assert not result.ok
    assert result.error.kind == "MachineNotFound"
    assert result.error.detail == "unknown-id"
    assert result.to_response() == (
        {"error": "Machine with system id unknown-id was not found!"},
        500,
    )


def test_listing_timeout_is_device_list_error(fleet):
    client = InMemoryControllerClient([remote_device()], fail_devices=requests.Timeout("read timed out"))
    service = PowerService(DeviceControlAdapter(fleet, SwitchDirectory(client), client))

    result = service.get_power_status(SYSTEM_ID)

    assert result.error.kind == "DeviceListError"
    body, status = result.to_response()
    assert status == 500
    assert body == {"error": "Failed to list devices, error: read timed out"}


def test_power_off_failure_message(fleet):
    client = InMemoryControllerClient([remote_device()], fail_writes=requests.HTTPError("502"))
    service = PowerService(DeviceControlAdapter(fleet, SwitchDirectory(client), client))

    result = service.power_off(SYSTEM_ID)

    assert result.error.kind == "FailedToPowerOff"
    assert result.error.message == "Failed to power off a port on the device device-id: 502!"
