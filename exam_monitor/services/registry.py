"""In-memory session registry: live connections and pending page loads.

Every method is synchronous, so a call runs to completion without yielding to
the event loop. Connection handlers and the sweeper share one registry on the
same loop and need no locking as long as they never hold a reference across
an ``await`` and expect it to still be current.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from exam_monitor.services.connection import LiveConnection


@dataclass
class ConnectionEntry:
    session_id: str
    handle: LiveConnection
    alive: bool = True


@dataclass(frozen=True)
class VisitEntry:
    session_id: str
    recorded_at: float


@dataclass(frozen=True)
class RegistrySnapshot:
    connections: tuple[ConnectionEntry, ...]
    visits: tuple[VisitEntry, ...]


class SessionRegistry:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._connections: dict[str, ConnectionEntry] = {}
        self._visits: dict[str, float] = {}

    def now(self) -> float:
        return self._clock()

    # ── Connections ──────────────────────────────────────────

    def upsert_connection(self, session_id: str, handle: LiveConnection) -> LiveConnection | None:
        """Install ``handle`` as the live connection for ``session_id``.

        Any pending visit for the id is dropped in the same step. Returns the
        handle this call replaced (the caller is responsible for closing it),
        or None.
        """
        previous = self._connections.get(session_id)
        self._connections[session_id] = ConnectionEntry(session_id=session_id, handle=handle)
        self._visits.pop(session_id, None)
        if previous is not None and previous.handle is not handle:
            return previous.handle
        return None

    def remove_connection(
        self, session_id: str, handle: LiveConnection | None = None
    ) -> ConnectionEntry | None:
        """Remove the connection entry for ``session_id``. Absent ids are a no-op.

        When ``handle`` is given the entry is only removed if it still belongs
        to that handle, so a replaced connection closing late cannot evict the
        connection that replaced it.
        """
        entry = self._connections.get(session_id)
        if entry is None:
            return None
        if handle is not None and entry.handle is not handle:
            return None
        del self._connections[session_id]
        return entry

    def mark_alive(self, session_id: str, handle: LiveConnection | None = None) -> bool:
        entry = self._connections.get(session_id)
        if entry is None:
            return False
        if handle is not None and entry.handle is not handle:
            return False
        entry.alive = True
        return True

    def get_connection(self, session_id: str) -> ConnectionEntry | None:
        return self._connections.get(session_id)

    def has_connection(self, session_id: str) -> bool:
        return session_id in self._connections

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    # ── Pending visits ───────────────────────────────────────

    def record_visit(self, session_id: str) -> bool:
        """Record a page load for ``session_id``.

        Returns False without storing anything when the id already has a live
        connection: the connection state always takes precedence.
        """
        if session_id in self._connections:
            return False
        self._visits[session_id] = self._clock()
        return True

    def has_visit(self, session_id: str) -> bool:
        return session_id in self._visits

    def visit_recorded_at(self, session_id: str) -> float | None:
        return self._visits.get(session_id)

    @property
    def visit_count(self) -> int:
        return len(self._visits)

    def expire_visits(self, cutoff: float) -> list[VisitEntry]:
        """Remove and return visits recorded before ``cutoff`` with no connection."""
        expired = [
            VisitEntry(session_id=sid, recorded_at=ts)
            for sid, ts in self._visits.items()
            if ts < cutoff and sid not in self._connections
        ]
        for visit in expired:
            del self._visits[visit.session_id]
        return expired

    # ── Sweep support ────────────────────────────────────────

    def snapshot(self) -> RegistrySnapshot:
        return RegistrySnapshot(
            connections=tuple(self._connections.values()),
            visits=tuple(
                VisitEntry(session_id=sid, recorded_at=ts) for sid, ts in self._visits.items()
            ),
        )
