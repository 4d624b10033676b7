import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import requests

from .errors import AuthError
from .unifi_client import ControllerClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwitchCredential:
    """
    Record of a successful controller login.

    The session cookie itself stays in the client's cookie jar; this value
    only describes it. It is never refreshed.
    """

    username: str
    authenticated_at: datetime
    cookie_names: List[str] = field(default_factory=list)


class SwitchSession:
    """Authenticates the shared controller client exactly once per process."""

    def __init__(self, client: ControllerClient):
        self.client = client
        self.credential: Optional[SwitchCredential] = None

    def authenticate(self, username: str, password: str) -> SwitchCredential:
        if self.credential is not None:
            raise RuntimeError("Controller session is already authenticated")

        try:
            self.client.login(username, password)
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise AuthError(str(exc), status_code=status) from exc
        except requests.RequestException as exc:
            raise AuthError(str(exc)) from exc

        http_session = getattr(self.client, "session", None)
        cookie_names = sorted(c.name for c in http_session.cookies) if http_session is not None else []
        self.credential = SwitchCredential(
            username=username,
            authenticated_at=datetime.now(timezone.utc),
            cookie_names=cookie_names,
        )
        logger.info("Authenticated to controller as %s (cookies: %s)", username, ", ".join(cookie_names) or "-")
        return self.credential
