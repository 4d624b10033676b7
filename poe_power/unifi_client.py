import logging
from abc import ABC, abstractmethod
from typing import List, Optional
from urllib.parse import urlparse

import requests
import urllib3

from .errors import FailedToConstructUrl
from .models import ControllerResponse, PoeMode, RemoteDevice

logger = logging.getLogger(__name__)

# disable insecure HTTPS warnings (self-signed certs)
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

SITE = "default"


class ControllerClient(ABC):
    """Operations the mediation layer needs from a PoE switch controller."""

    @abstractmethod
    def login(self, username: str, password: str) -> None:
        """Authenticate; the session is kept by the client for later calls."""

    @abstractmethod
    def devices(self) -> ControllerResponse[List[RemoteDevice]]:
        """List every device the controller knows about, with port tables."""

    @abstractmethod
    def power_on(self, device_id: str, port_idx: int) -> None:
        """Override the port's PoE mode to auto."""

    @abstractmethod
    def power_off(self, device_id: str, port_idx: int) -> None:
        """Override the port's PoE mode to off."""


def _validate_base_url(url: str) -> str:
    u = (url or "").strip().rstrip("/")
    parsed = urlparse(u)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise FailedToConstructUrl(
            f"Controller URL {url!r} is not a valid http(s) URL (e.g. https://unifi.example.com:8443)"
        )
    return u


class UnifiClient(ControllerClient):
    """
    Client for a self-hosted UniFi-style controller.

    A single requests.Session is shared by all callers. Its cookie jar
    carries the session obtained by login(); nothing writes to it afterwards,
    so concurrent request threads can use the client without locking.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        verify_ssl: bool = False,
        timeout: Optional[float] = None,
    ):
        self.base_url = _validate_base_url(base_url)
        self.verify_ssl = verify_ssl
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        self.logger = logging.getLogger(f"{__name__}.{urlparse(self.base_url).netloc}")

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _post(self, path: str, payload: dict) -> requests.Response:
        resp = self.session.post(
            self._url(path),
            json=payload,
            verify=self.verify_ssl,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp

    def login(self, username: str, password: str) -> None:
        self.logger.info("Logging in to controller %s as %s", self.base_url, username)
        self._post("/api/login", {"username": username, "password": password})

    def devices(self) -> ControllerResponse[List[RemoteDevice]]:
        self.logger.debug("Fetching device list from %s", self.base_url)
        resp = self.session.get(
            self._url(f"/api/s/{SITE}/stat/device"),
            verify=self.verify_ssl,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return ControllerResponse.devices_from_json(resp.json())

    def _set_poe_mode(self, device_id: str, port_idx: int, mode: PoeMode) -> None:
        payload = {"port_overrides": [{"port_idx": port_idx, "poe_mode": mode.value}]}
        self.logger.info(
            "Setting PoE mode %s on device %s port %s", mode.value, device_id, port_idx
        )
        self._post(f"/api/s/{SITE}/rest/device/{device_id}", payload)

    def power_on(self, device_id: str, port_idx: int) -> None:
        self._set_poe_mode(device_id, port_idx, PoeMode.AUTO)

    def power_off(self, device_id: str, port_idx: int) -> None:
        self._set_poe_mode(device_id, port_idx, PoeMode.OFF)
