"""Error taxonomy shared by the controller client, the adapter and the HTTP layer."""

from typing import Optional


class PowerControlError(Exception):
    """
    Base class for every error surfaced to callers.

    kind is a stable identifier, detail the variable part (mac, id, port,
    underlying error) and http_status the status used by the HTTP layer.
    """

    kind = "PowerControlError"
    http_status = 500
    template = "{detail}"

    def __init__(self, detail: object = ""):
        self.detail = str(detail)
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return self.template.format(detail=self.detail)


class MissingSystemId(PowerControlError):
    kind = "MissingSystemId"
    http_status = 400
    template = "System ID was not found in MaaS request."


class DeviceNotFound(PowerControlError):
    kind = "DeviceNotFound"
    template = "Device with mac address {detail} was not found!"


class MachineNotFound(PowerControlError):
    kind = "MachineNotFound"
    template = "Machine with system id {detail} was not found!"


class MachinePortIdIncorrect(PowerControlError):
    kind = "MachinePortIdIncorrect"
    template = "Found no machine on port {detail}!"


class DeviceListError(PowerControlError):
    kind = "DeviceListError"
    template = "Failed to list devices, error: {detail}"


class FailedToConstructUrl(PowerControlError):
    kind = "FailedToConstructUrl"
    http_status = 422


class FailedToPowerOn(PowerControlError):
    kind = "FailedToPowerOn"
    template = "Failed to power on a port on the device {detail}!"


class FailedToPowerOff(PowerControlError):
    kind = "FailedToPowerOff"
    template = "Failed to power off a port on the device {detail}!"


class AuthError(PowerControlError):
    kind = "AuthError"
    template = "Failed to log in to the controller: {detail}"

    def __init__(self, detail: object = "", status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(detail)
