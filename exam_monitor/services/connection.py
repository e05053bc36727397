"""WebSocket transport handle owned by the session registry."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from exam_monitor.schemas.ws_messages import LivenessProbe

logger = logging.getLogger(__name__)


class SendError(Exception):
    """Writing to a connection failed; the connection must be torn down."""


class LiveConnection(Protocol):
    async def send_json(self, payload: dict[str, Any]) -> None: ...

    async def probe(self) -> None: ...

    async def terminate(self, code: int = 1000, reason: str = "") -> None: ...


class WebSocketConnection:
    def __init__(self, websocket: WebSocket, send_timeout: float | None = None):
        self.websocket = websocket
        self.send_timeout = send_timeout

    @property
    def closed(self) -> bool:
        return self.websocket.application_state == WebSocketState.DISCONNECTED

    async def send_json(self, payload: dict[str, Any]) -> None:
        await self._send_text(json.dumps(payload))

    async def probe(self) -> None:
        await self._send_text(LivenessProbe().model_dump_json())

    async def terminate(self, code: int = 1000, reason: str = "") -> None:
        if self.closed:
            return
        try:
            await self.websocket.close(code=code, reason=reason)
        except (RuntimeError, OSError) as e:
            # Peer already gone; the transport is released either way.
            logger.debug("Close on a dead socket ignored: %s", e)

    async def _send_text(self, data: str) -> None:
        if self.closed:
            raise SendError("connection already closed")
        try:
            await asyncio.wait_for(self.websocket.send_text(data), timeout=self.send_timeout)
        except asyncio.TimeoutError as e:
            raise SendError(f"send timed out after {self.send_timeout}s") from e
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            raise SendError(str(e) or type(e).__name__) from e
