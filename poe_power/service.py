import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from .errors import PowerControlError
from .handler import DeviceControlAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PowerError:
    kind: str
    detail: str
    message: str
    http_status: int


@dataclass(frozen=True)
class PowerResult:
    """Either a success payload or a tagged failure; never both."""

    payload: Optional[Dict[str, Any]] = None
    error: Optional[PowerError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, exc: PowerControlError) -> "PowerResult":
        return cls(
            error=PowerError(
                kind=exc.kind,
                detail=exc.detail,
                message=exc.message,
                http_status=exc.http_status,
            )
        )

    def to_response(self) -> Tuple[Dict[str, Any], int]:
        if self.error is not None:
            return {"error": self.error.message}, self.error.http_status
        return dict(self.payload or {}), 200


class PowerService:
    """
    Entry point for the HTTP layer.

    Holds no per-request state, so one instance serves all request threads.
    """

    def __init__(self, adapter: DeviceControlAdapter):
        self.adapter = adapter

    def _run(self, operation: str, external_id: str, fn: Callable[[], Dict[str, Any]]) -> PowerResult:
        try:
            payload = fn()
        except PowerControlError as exc:
            logger.warning("%s for %s failed: %s (%s)", operation, external_id, exc.message, exc.kind)
            return PowerResult.failure(exc)
        return PowerResult(payload=payload)

    def get_power_status(self, external_id: str) -> PowerResult:
        return self._run(
            "power-status",
            external_id,
            lambda: {"status": self.adapter.get_power_status(external_id).value},
        )

    def power_on(self, external_id: str) -> PowerResult:
        def _do() -> Dict[str, Any]:
            self.adapter.power_on(external_id)
            return {}

        return self._run("power-on", external_id, _do)

    def power_off(self, external_id: str) -> PowerResult:
        def _do() -> Dict[str, Any]:
            self.adapter.power_off(external_id)
            return {}

        return self._run("power-off", external_id, _do)
