import logging
from typing import List

import requests

from .errors import DeviceListError, DeviceNotFound
from .models import RemoteDevice, normalize_mac
from .unifi_client import ControllerClient

logger = logging.getLogger(__name__)


class SwitchDirectory:
    """Read-through view of the devices known to the controller (no caching)."""

    def __init__(self, client: ControllerClient):
        self.client = client

    def list_devices(self) -> List[RemoteDevice]:
        try:
            response = self.client.devices()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Device listing failed: %s", exc)
            raise DeviceListError(str(exc)) from exc

        if response.rc != "ok":
            logger.warning("Controller returned meta.rc=%r for device listing", response.rc)
        logger.debug("Controller listed %s devices", len(response.data))
        return response.data

    def resolve_handle(self, address: str) -> str:
        """Translate a device MAC into the controller's own device id."""
        wanted = normalize_mac(address)
        for device in self.list_devices():
            if device.address == wanted:
                return device.controller_handle
        raise DeviceNotFound(address)

    def device(self, handle: str) -> RemoteDevice:
        for device in self.list_devices():
            if device.controller_handle == handle:
                return device
        raise DeviceNotFound(handle)
