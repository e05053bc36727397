from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class ForceLogout(BaseModel):
    """Sent to a connection right before the server terminates it."""

    type: Literal["forceLogout"] = "forceLogout"
    reason: str = "Unresponsive"


class LivenessProbe(BaseModel):
    type: Literal["ping"] = "ping"
