"""Module: sessions."""

import threading
import uuid
from secrets import token_urlsafe


class SessionRegistry:
    """In-memory bearer tokens -> user ids. Lost on restart."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tokens: dict[str, uuid.UUID] = {}

    def issue(self, user_id: uuid.UUID) -> str:
        token = token_urlsafe(32)
        with self._lock:
            self._tokens[token] = user_id
        return token

    def resolve(self, token: str | None) -> uuid.UUID | None:
        if not token:
            return None
        with self._lock:
            return self._tokens.get(token)

    def revoke(self, token: str) -> None:
        with self._lock:
            self._tokens.pop(token, None)

    def revoke_user(self, user_id: uuid.UUID) -> None:
        with self._lock:
            for token in [t for t, uid in self._tokens.items() if uid == user_id]:
                del self._tokens[token]


sessions = SessionRegistry()
