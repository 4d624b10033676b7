import logging
from typing import Tuple

import requests

from .directory import SwitchDirectory
from .errors import (
    DeviceNotFound,
    FailedToPowerOff,
    FailedToPowerOn,
    MachineNotFound,
    MachinePortIdIncorrect,
)
from .models import ManagedFleet, ManagedMachine, PowerState
from .unifi_client import ControllerClient

logger = logging.getLogger(__name__)


class DeviceControlAdapter:
    """
    Answers power questions about a machine by way of its switch port.

    Resolution chain for every operation:
      external id -> configured switch address + machine entry
                  -> controller device id (listing the controller's devices)
                  -> port status read, or a single port-override write.

    Every step fails fast with the most specific error. Unknown ids never
    reach the controller.
    """

    def __init__(self, fleet: ManagedFleet, directory: SwitchDirectory, client: ControllerClient):
        self.fleet = fleet
        self.directory = directory
        self.client = client

    def _resolve(self, external_id: str, machine_first: bool = False) -> Tuple[ManagedMachine, str]:
        # Status reads report an unknown id as a missing device, writes as a
        # missing machine.
        if machine_first and self.fleet.resolve_machine(external_id) is None:
            raise MachineNotFound(external_id)

        address = self.fleet.resolve_address(external_id)
        if address is None:
            raise DeviceNotFound(external_id)

        machine = self.fleet.resolve_machine(external_id)
        if machine is None:
            raise MachineNotFound(external_id)

        handle = self.directory.resolve_handle(address)
        logger.debug(
            "Resolved %s to device %s (%s) port %s", external_id, address, handle, machine.port_index
        )
        return machine, handle

    def get_power_status(self, external_id: str) -> PowerState:
        machine, handle = self._resolve(external_id)
        device = self.directory.device(handle)

        port = device.port(machine.port_index)
        if port is None:
            raise MachinePortIdIncorrect(machine.port_index)

        # A port without PoE data is reported as a missing device.
        if port.power_mode is None:
            raise DeviceNotFound("")

        state = PowerState.from_poe_mode(port.power_mode)
        logger.info("Machine %s on %s port %s is %s", external_id, handle, port.index, state.value)
        return state

    def power_on(self, external_id: str) -> None:
        machine, handle = self._resolve(external_id, machine_first=True)
        try:
            self.client.power_on(handle, machine.port_index)
        except requests.RequestException as exc:
            logger.error("Power on of %s (device %s port %s) failed: %s", external_id, handle, machine.port_index, exc)
            raise FailedToPowerOn(f"{handle}: {exc}") from exc
        logger.info("Powered on machine %s (device %s port %s)", external_id, handle, machine.port_index)

    def power_off(self, external_id: str) -> None:
        machine, handle = self._resolve(external_id, machine_first=True)
        try:
            self.client.power_off(handle, machine.port_index)
        except requests.RequestException as exc:
            logger.error("Power off of %s (device %s port %s) failed: %s", external_id, handle, machine.port_index, exc)
            raise FailedToPowerOff(f"{handle}: {exc}") from exc
        logger.info("Powered off machine %s (device %s port %s)", external_id, handle, machine.port_index)
