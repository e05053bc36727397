"""Per-connection lifecycle: register, track liveness signals, clean up."""

from __future__ import annotations

import logging

from fastapi import WebSocket, status

from exam_monitor.services.connection import WebSocketConnection
from exam_monitor.services.registry import SessionRegistry

logger = logging.getLogger(__name__)

ALIVE_TOKEN = "alive"
PONG_TOKEN = "pong"
LIVENESS_SIGNALS = frozenset({ALIVE_TOKEN, PONG_TOKEN})


def is_liveness_signal(payload: str | None) -> bool:
    """Exact, case-sensitive match against the liveness tokens."""
    return payload in LIVENESS_SIGNALS


def _decode(message: dict) -> str | None:
    text = message.get("text")
    if text is not None:
        return text
    data = message.get("bytes")
    if data is not None:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return None
    return None


class ConnectionHandler:
    def __init__(self, registry: SessionRegistry, send_timeout: float | None = None):
        self.registry = registry
        self.send_timeout = send_timeout

    async def handle(self, websocket: WebSocket) -> None:
        session_id = websocket.query_params.get("id")
        if not session_id:
            await websocket.accept()
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Missing ID")
            logger.info("Rejected connection without session id")
            return

        conn = WebSocketConnection(websocket, send_timeout=self.send_timeout)
        try:
            # Only accepted sockets are registered, so every entry the sweeper
            # sees can be probed.
            await websocket.accept()
            replaced = self.registry.upsert_connection(session_id, conn)
            logger.info("Session %s connected", session_id)
            if replaced is not None:
                logger.info("Session %s reconnected, closing previous connection", session_id)
                await replaced.terminate(code=status.WS_1000_NORMAL_CLOSURE, reason="Replaced")

            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                if is_liveness_signal(_decode(message)):
                    self.registry.mark_alive(session_id, conn)
        except Exception:
            logger.exception("Connection for session %s failed", session_id)
        finally:
            if self.registry.remove_connection(session_id, conn) is not None:
                logger.warning("Session %s disconnected", session_id)
