from __future__ import annotations

from pydantic import BaseModel


class StatusRead(BaseModel):
    status: str = "ok"
    live_connections: int
    pending_visits: int
    sweep_interval_ms: int
    visit_expiry_ms: int
    sweeper_running: bool
