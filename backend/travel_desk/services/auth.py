from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from travel_desk.storage.backends import KeyValueBackend

logger = logging.getLogger(__name__)

AUTH_KEY = "admin_auth"

Listener = Callable[["AuthState"], None]


@dataclass
class AuthState:
    is_authenticated: bool = False
    username: Optional[str] = None


class AuthService:
    """
    Gate for the admin endpoints: a single configured credential pair and one
    session flag kept in the key-value backend. There is no hashing, expiry
    or lockout; this only fits a local demo.
    """

    def __init__(self, backend: KeyValueBackend, username: str, password: str) -> None:
        self.backend = backend
        self._username = username
        self._password = password
        self._state = AuthState()
        self._listeners: List[Listener] = []
        self._restore()

    def _restore(self) -> None:
        stored = self.backend.get_item(AUTH_KEY)
        if not stored:
            return
        try:
            parsed = json.loads(stored)
            if parsed.get("isAuthenticated") and parsed.get("username"):
                self._state = AuthState(is_authenticated=True, username=parsed["username"])
        except (ValueError, AttributeError):
            logger.warning("Discarding malformed session in %s", AUTH_KEY)
            self.backend.remove_item(AUTH_KEY)

    def login(self, username: str, password: str) -> bool:
        if username != self._username or password != self._password:
            logger.info("Rejected admin login for %r", username)
            return False
        self._state = AuthState(is_authenticated=True, username=username)
        self.backend.set_item(
            AUTH_KEY, json.dumps({"isAuthenticated": True, "username": username})
        )
        self._notify()
        return True

    def logout(self) -> None:
        self._state = AuthState()
        self.backend.remove_item(AUTH_KEY)
        self._notify()

    def get_auth_state(self) -> AuthState:
        return replace(self._state)

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.get_auth_state())
