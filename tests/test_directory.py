"""Tests for the controller device directory."""

import pytest
import requests

from poe_power.directory import SwitchDirectory
from poe_power.errors import DeviceListError, DeviceNotFound
from poe_power.memory_client import InMemoryControllerClient

from .conftest import DEVICE_ID, remote_device


def test_resolve_handle_matches_any_mac_spelling():
    directory = SwitchDirectory(InMemoryControllerClient([remote_device()]))
    assert directory.resolve_handle("00-00-00-00-00-00") == DEVICE_ID


def test_resolve_handle_reports_missing_device():
    directory = SwitchDirectory(InMemoryControllerClient([]))
    with pytest.raises(DeviceNotFound) as exc_info:
        directory.resolve_handle("aa:aa:aa:aa:aa:aa")
    assert exc_info.value.detail == "aa:aa:aa:aa:aa:aa"


def test_every_lookup_refetches():
    client = InMemoryControllerClient([remote_device()])
    directory = SwitchDirectory(client)
    directory.resolve_handle("00:00:00:00:00:00")
    directory.device(DEVICE_ID)
    assert client.list_calls == 2


@pytest.mark.parametrize(
    "failure",
    [requests.Timeout("read timed out"), requests.ConnectionError("refused"), ValueError("bad json")],
)
def test_listing_failures_become_device_list_error(failure):
    directory = SwitchDirectory(InMemoryControllerClient(fail_devices=failure))
    with pytest.raises(DeviceListError) as exc_info:
        directory.list_devices()
    assert str(failure) in exc_info.value.detail


def test_device_by_unknown_handle():
    directory = SwitchDirectory(InMemoryControllerClient([remote_device()]))
    with pytest.raises(DeviceNotFound):
        directory.device("other")
