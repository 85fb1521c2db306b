from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from threading import Lock
from typing import Protocol


def build_session_key(user_id: str, channel_id: str) -> str:
    return f"{user_id}_{channel_id}"


@dataclass(frozen=True)
class SessionRecord:
    provider_session_id: str
    user_id: str
    channel_id: str
    user_name: str
    created_at: datetime
    last_activity_at: datetime

    @property
    def session_key(self) -> str:
        return build_session_key(self.user_id, self.channel_id)


class SessionStore(Protocol):
    def get(self, key: str) -> SessionRecord | None: ...

    def put(self, key: str, record: SessionRecord) -> None: ...

    def remove(self, key: str) -> None: ...

    def touch(self, key: str, at: datetime | None = None) -> bool: ...

    def clear(self) -> int: ...

    def sweep(self, max_idle: timedelta, now: datetime | None = None) -> int: ...

    def size(self) -> int: ...

    def list_all(self) -> list[tuple[str, SessionRecord]]: ...


class InMemorySessionStore:
    """
    Process-local session store keyed by `user_id + "_" + channel_id`.
    Every operation holds the same lock; records are immutable, so snapshots
    handed to callers never change underneath them.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, SessionRecord] = {}
        self._lock = Lock()

    def get(self, key: str) -> SessionRecord | None:
        with self._lock:
            return self._sessions.get(key)

    def put(self, key: str, record: SessionRecord) -> None:
        with self._lock:
            self._sessions[key] = record

    def remove(self, key: str) -> None:
        with self._lock:
            self._sessions.pop(key, None)

    def touch(self, key: str, at: datetime | None = None) -> bool:
        moment = at or datetime.now(UTC)
        with self._lock:
            record = self._sessions.get(key)
            if record is None:
                return False
            self._sessions[key] = replace(
                record,
                last_activity_at=max(moment, record.created_at),
            )
            return True

    def clear(self) -> int:
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
            return count

    def sweep(self, max_idle: timedelta, now: datetime | None = None) -> int:
        cutoff = (now or datetime.now(UTC)) - max_idle
        with self._lock:
            stale = [
                key
                for key, record in self._sessions.items()
                if record.last_activity_at < cutoff
            ]
            for key in stale:
                del self._sessions[key]
            return len(stale)

    def size(self) -> int:
        with self._lock:
            return len(self._sessions)

    def list_all(self) -> list[tuple[str, SessionRecord]]:
        with self._lock:
            return list(self._sessions.items())
