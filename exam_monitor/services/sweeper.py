"""Periodic liveness sweep over the session registry.

Each tick first drops page loads that never turned into a connection, then
health-checks every live connection. A connection whose alive flag is still
clear from the previous tick is logged out and terminated; every other
connection has its flag cleared and receives a fresh probe. A connection
therefore has one full interval to answer (``alive`` or ``pong``) before the
next tick terminates it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from fastapi import status

from exam_monitor.schemas.ws_messages import ForceLogout
from exam_monitor.services.connection import LiveConnection, SendError
from exam_monitor.services.registry import SessionRegistry

logger = logging.getLogger(__name__)

UNRESPONSIVE_REASON = "Unresponsive"


@dataclass
class SweepReport:
    expired_visits: list[str] = field(default_factory=list)
    forced_logouts: list[str] = field(default_factory=list)
    probed: list[str] = field(default_factory=list)
    failed_probes: list[str] = field(default_factory=list)


class LivenessSweeper:
    def __init__(
        self,
        registry: SessionRegistry,
        interval: float = 5.0,
        visit_expiry: float = 2.0,
    ):
        self.registry = registry
        self.interval = interval
        self.visit_expiry = visit_expiry
        self._task: asyncio.Task | None = None
        self._inflight: asyncio.Future | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the repeating sweep on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        inflight = self._inflight
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        # Entries already removed by an interrupted tick still own open
        # transports; let their logout/terminate sends finish.
        if inflight is not None:
            try:
                await inflight
            except Exception:
                logger.exception("Interrupted sweep failed while finishing teardown")

    async def _run(self) -> None:
        logger.info(
            "Liveness sweeper started (interval=%.1fs, visit expiry=%.1fs)",
            self.interval, self.visit_expiry,
        )
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.sweep()
            except Exception:
                logger.exception("Liveness sweep failed")

    async def sweep(self) -> SweepReport:
        """Run one reconciliation tick and report what it did."""
        report = SweepReport()
        now = self.registry.now()

        for visit in self.registry.expire_visits(now - self.visit_expiry):
            logger.warning("Session %s loaded the page but never went live", visit.session_id)
            report.expired_visits.append(visit.session_id)

        # Decide everything against one snapshot before the first await, so no
        # handler can interleave between reading a flag and acting on it.
        stale: list[tuple[str, LiveConnection]] = []
        probes: list[tuple[str, LiveConnection]] = []
        for entry in self.registry.snapshot().connections:
            if not entry.alive:
                self.registry.remove_connection(entry.session_id, entry.handle)
                stale.append((entry.session_id, entry.handle))
                report.forced_logouts.append(entry.session_id)
            else:
                entry.alive = False
                probes.append((entry.session_id, entry.handle))
                report.probed.append(entry.session_id)

        io = asyncio.gather(
            *(self._force_logout(sid, handle) for sid, handle in stale),
            *(self._probe(sid, handle) for sid, handle in probes),
        )
        self._inflight = io
        try:
            results = await asyncio.shield(io)
        finally:
            if self._inflight is io:
                self._inflight = None
        report.failed_probes.extend(sid for sid in results if sid is not None)
        return report

    async def _force_logout(self, session_id: str, handle: LiveConnection) -> None:
        logger.warning("Session %s is unresponsive, forcing logout", session_id)
        try:
            await handle.send_json(ForceLogout(reason=UNRESPONSIVE_REASON).model_dump())
        except SendError as e:
            logger.error("Error sending logout to session %s: %s", session_id, e)
        await handle.terminate(code=status.WS_1008_POLICY_VIOLATION, reason=UNRESPONSIVE_REASON)

    async def _probe(self, session_id: str, handle: LiveConnection) -> str | None:
        try:
            await handle.probe()
        except SendError as e:
            logger.error("Probe to session %s failed, dropping connection: %s", session_id, e)
            self.registry.remove_connection(session_id, handle)
            await handle.terminate(code=status.WS_1011_INTERNAL_ERROR, reason=UNRESPONSIVE_REASON)
            return session_id
        return None
