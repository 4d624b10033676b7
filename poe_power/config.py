import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

import yaml

from .models import ManagedDevice, ManagedFleet, ManagedMachine, normalize_mac

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.yml"


def _normalize_controller_url(url: str) -> str:
    """Normalize the controller URL and ensure it has a host."""
    u = url.strip().rstrip("/")
    # Collapse extra slashes after :// (e.g. https:///host -> https://host)
    u = re.sub(r"(https?):///+", r"\1://", u)
    parsed = urlparse(u)
    if not parsed.netloc:
        raise RuntimeError(
            f"controller.url has no host: {url!r}. "
            "Use e.g. https://unifi.example.com:8443 (no extra slashes)."
        )
    return u


@dataclass
class ControllerSettings:
    url: str
    username: str
    password: str
    verify_ssl: bool = False
    timeout: Optional[float] = None
    fake: bool = False


@dataclass
class Settings:
    controller: ControllerSettings
    fleet: ManagedFleet
    listen_host: str = "0.0.0.0"
    listen_port: int = 3000
    log_level: str = "INFO"
    log_dir: Optional[Path] = None


def _read_secret_file(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    p = Path(path)
    if not p.is_file():
        logger.warning("Secret file %s does not exist", p)
        return None
    return p.read_text(encoding="utf-8").strip()


def _secret(section: dict, key: str, env_name: str) -> Optional[str]:
    """Inline value, then `<key>_file`, then environment variable."""
    value = section.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    file_value = section.get(f"{key}_file")
    if isinstance(file_value, str) and file_value.strip():
        return _read_secret_file(file_value.strip())
    return os.getenv(env_name) or None


def _parse_controller(raw: object) -> ControllerSettings:
    if not isinstance(raw, dict):
        raise RuntimeError("controller must be a mapping/object")

    url = raw.get("url")
    if not isinstance(url, str) or not url.strip():
        raise RuntimeError("controller.url is required")
    url = _normalize_controller_url(url)

    fake = raw.get("fake", False)
    if not isinstance(fake, bool):
        raise RuntimeError("controller.fake must be boolean")

    username = _secret(raw, "username", "UNIFI_USERNAME")
    password = _secret(raw, "password", "UNIFI_PASSWORD")
    if not fake and (not username or password is None):
        raise RuntimeError(
            "Controller credentials not configured. Set controller.username/controller.password "
            "(or password_file), or UNIFI_USERNAME/UNIFI_PASSWORD."
        )

    verify_ssl = raw.get("verify_ssl", False)
    if not isinstance(verify_ssl, bool):
        raise RuntimeError("controller.verify_ssl must be boolean")

    timeout = raw.get("timeout")
    if timeout is not None:
        try:
            timeout = float(timeout)
        except (TypeError, ValueError) as exc:
            raise RuntimeError("controller.timeout must be a number (seconds) or null") from exc
        if timeout <= 0:
            raise RuntimeError("controller.timeout must be > 0")

    return ControllerSettings(
        url=url,
        username=username or "",
        password=password or "",
        verify_ssl=verify_ssl,
        timeout=timeout,
        fake=fake,
    )


def parse_fleet(raw: object) -> ManagedFleet:
    """Build the managed fleet from the `devices` list of the config file."""
    if not isinstance(raw, list):
        raise RuntimeError("devices must be a list")

    seen_ids: set = set()
    devices: List[ManagedDevice] = []
    for n, d in enumerate(raw, start=1):
        if not isinstance(d, dict):
            raise RuntimeError(f"devices[{n}] must be a mapping/object")
        try:
            address = normalize_mac(d.get("mac", ""))
        except ValueError as exc:
            raise RuntimeError(f"devices[{n}].mac: {exc}") from exc

        machines_raw = d.get("machines") or []
        if not isinstance(machines_raw, list):
            raise RuntimeError(f"Device {address} machines must be a list")

        machines: List[ManagedMachine] = []
        for m in machines_raw:
            if not isinstance(m, dict):
                raise RuntimeError(f"Device {address}: each machine must be a mapping/object")
            system_id = m.get("system_id")
            if not isinstance(system_id, str) or not system_id.strip():
                raise RuntimeError(f"Device {address}: each machine needs a non-empty system_id")
            system_id = system_id.strip()
            port_id = m.get("port_id")
            if isinstance(port_id, bool) or not isinstance(port_id, int) or port_id < 0:
                raise RuntimeError(f"Machine {system_id!r}: port_id must be a non-negative integer")
            if system_id in seen_ids:
                raise RuntimeError(f"Machine {system_id!r} is listed more than once")
            seen_ids.add(system_id)
            machines.append(ManagedMachine(external_id=system_id, port_index=port_id))

        devices.append(ManagedDevice(address=address, machines=tuple(machines)))

    return ManagedFleet(devices=tuple(devices))


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from the YAML config file (APP_CONFIG_FILE, default config.yml)."""
    path = path or os.getenv("APP_CONFIG_FILE", DEFAULT_CONFIG_FILE)
    p = Path(path)
    if not p.is_file():
        raise RuntimeError(f"Config file not found: {path}")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise RuntimeError(f"Failed to read YAML config: {path}") from exc

    if not isinstance(raw, dict):
        raise RuntimeError("YAML config root must be a mapping/object")

    controller = _parse_controller(raw.get("controller") or {})
    fleet = parse_fleet(raw.get("devices") or [])
    if not fleet.devices:
        logger.warning("No devices configured in %s; every request will fail", path)

    # Server config
    server = raw.get("server") or {}
    if not isinstance(server, dict):
        raise RuntimeError("server must be a mapping/object")
    listen_host = str(server.get("host", "0.0.0.0"))
    try:
        listen_port = int(server.get("port", 3000))
    except (TypeError, ValueError) as exc:
        raise RuntimeError("server.port must be an integer") from exc

    # Runtime config
    runtime = raw.get("runtime") or {}
    if not isinstance(runtime, dict):
        raise RuntimeError("runtime must be a mapping/object")
    log_level = str(runtime.get("log_level") or os.getenv("LOG_LEVEL", "INFO"))
    log_dir = runtime.get("log_dir")

    logger.info(
        "Loaded %s devices / %s machines from %s", len(fleet.devices), fleet.machine_count(), path
    )

    return Settings(
        controller=controller,
        fleet=fleet,
        listen_host=listen_host,
        listen_port=listen_port,
        log_level=log_level,
        log_dir=Path(str(log_dir)) if log_dir else None,
    )
