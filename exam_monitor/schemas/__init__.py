"""Pydantic wire and response schemas."""

from exam_monitor.schemas.status import StatusRead
from exam_monitor.schemas.ws_messages import ForceLogout, LivenessProbe

__all__ = [
    "StatusRead",
    "ForceLogout", "LivenessProbe",
]
