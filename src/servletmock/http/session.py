"""
Session fixture.

A passive attribute bag. There is no expiry thread: max_inactive_interval
is stored and reported, never enforced.
"""

import logging
import secrets
import time
from typing import Any, Dict, List, Optional

from ..errors import UnsupportedInFixtureError
from .interface import HttpSession


logger = logging.getLogger(__name__)


def _now_millis() -> int:
    return int(time.time() * 1000)


class HttpSessionMock(HttpSession):
    """
    In-memory session.

    Example:
        session = HttpSessionMock()
        session.set_attribute("user", "alice")
        request = HttpRequestMock().with_session(session)
    """

    def __init__(self, session_id: Optional[str] = None, attributes: Optional[Dict[str, Any]] = None):
        self._id = session_id or secrets.token_hex(8)
        self._creation_time = _now_millis()
        self._last_accessed_time = self._creation_time
        self._max_inactive_interval = 0
        self._attributes: Dict[str, Any] = dict(attributes or {})

    def get_id(self) -> str:
        return self._id

    def get_creation_time(self) -> int:
        return self._creation_time

    def get_last_accessed_time(self) -> int:
        return self._last_accessed_time

    def get_max_inactive_interval(self) -> int:
        return self._max_inactive_interval

    def set_max_inactive_interval(self, interval: int) -> None:
        self._max_inactive_interval = interval

    def get_attribute(self, name: str) -> Any:
        return self._attributes.get(name)

    def set_attribute(self, name: str, value: Any) -> None:
        self._attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self._attributes.pop(name, None)

    def get_attribute_names(self) -> List[str]:
        return list(self._attributes)

    def invalidate(self) -> None:
        """Clear attributes and set the inactive interval to -1."""
        self.set_max_inactive_interval(-1)
        self._attributes.clear()
        logger.debug(f"Session {self._id} invalidated")

    @property
    def is_invalidated(self) -> bool:
        return self._max_inactive_interval < 0

    def is_new(self) -> bool:
        return False

    def get_servlet_context(self) -> Any:
        raise UnsupportedInFixtureError("HttpSession.get_servlet_context")
