import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

T = TypeVar("T")

_MAC_RE = re.compile(r"^[0-9a-f]{2}([:-])(?:[0-9a-f]{2}\1){4}[0-9a-f]{2}$", re.IGNORECASE)


def normalize_mac(value: str) -> str:
    """Return a MAC address as lower-case, colon separated (aa:bb:cc:dd:ee:ff)."""
    s = str(value).strip()
    if not _MAC_RE.match(s):
        raise ValueError(f"Invalid MAC address: {value!r}")
    return s.replace("-", ":").lower()


class PoeMode(Enum):
    """PoE setting of a switch port as reported by the controller."""

    AUTO = "auto"
    OFF = "off"


class PowerState(Enum):
    """Power state reported to callers."""

    RUNNING = "running"
    STOPPED = "stopped"

    @classmethod
    def from_poe_mode(cls, mode: PoeMode) -> "PowerState":
        if mode is PoeMode.AUTO:
            return cls.RUNNING
        return cls.STOPPED


@dataclass(frozen=True)
class ManagedMachine:
    """A machine plugged into a given port of a managed switch."""

    external_id: str
    port_index: int


@dataclass(frozen=True)
class ManagedDevice:
    """A switch from the static configuration and the machines it powers."""

    address: str  # normalized MAC
    machines: Tuple[ManagedMachine, ...] = ()


@dataclass(frozen=True)
class ManagedFleet:
    """
    All managed switches, loaded once at startup and never mutated.

    External ids are unique across the fleet, so the first match is the
    only match.
    """

    devices: Tuple[ManagedDevice, ...] = ()

    def _owning_device(self, external_id: str) -> Optional[ManagedDevice]:
        for device in self.devices:
            if any(m.external_id == external_id for m in device.machines):
                return device
        return None

    def resolve_address(self, external_id: str) -> Optional[str]:
        """Return the address of the switch that powers the given machine."""
        device = self._owning_device(external_id)
        return device.address if device else None

    def resolve_machine(self, external_id: str) -> Optional[ManagedMachine]:
        """Return the configured machine entry for the given id."""
        device = self._owning_device(external_id)
        if device is None:
            return None
        for machine in device.machines:
            if machine.external_id == external_id:
                return machine
        return None

    def machine_count(self) -> int:
        return sum(len(d.machines) for d in self.devices)


@dataclass
class RemotePort:
    """
    Port entry from the controller's port table.

    power_mode is None when the controller reports no PoE data for the port.
    """

    index: int
    power_mode: Optional[PoeMode] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "RemotePort":
        idx = raw["port_idx"]
        if isinstance(idx, bool) or not isinstance(idx, int) or idx < 0:
            raise ValueError(f"Invalid port_idx in port table: {idx!r}")
        mode = raw.get("poe_mode")
        return cls(index=idx, power_mode=PoeMode(mode) if mode is not None else None)


@dataclass
class RemoteDevice:
    """Device as listed by the controller. Built per request, never cached."""

    address: str
    controller_handle: str
    ports: List[RemotePort] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "RemoteDevice":
        if not isinstance(raw, dict):
            raise ValueError(f"Device entry must be an object, got {type(raw).__name__}")
        handle = raw["device_id"]
        if not isinstance(handle, str):
            raise ValueError(f"Invalid device_id: {handle!r}")
        ports_raw = raw.get("port_table") or []
        if not isinstance(ports_raw, list):
            raise ValueError("port_table must be a list")
        return cls(
            address=normalize_mac(raw["mac"]),
            controller_handle=handle,
            ports=[RemotePort.from_dict(p) for p in ports_raw],
        )

    def port(self, index: int) -> Optional[RemotePort]:
        for p in self.ports:
            if p.index == index:
                return p
        return None


@dataclass
class ControllerResponse(Generic[T]):
    """Controller envelope: {"meta": {"rc": ...}, "data": ...}."""

    rc: str
    data: T

    @classmethod
    def devices_from_json(cls, payload: Any) -> "ControllerResponse[List[RemoteDevice]]":
        if not isinstance(payload, dict):
            raise ValueError("Controller response root must be an object")
        meta = payload.get("meta")
        if not isinstance(meta, dict) or not isinstance(meta.get("rc"), str):
            raise ValueError("Controller response is missing meta.rc")
        data = payload.get("data")
        if not isinstance(data, list):
            raise ValueError("Controller response data must be a list")
        try:
            devices = [RemoteDevice.from_dict(d) for d in data]
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed device entry: {exc!r}") from exc
        return cls(rc=meta["rc"], data=devices)
