"""FastAPI dependencies resolving the per-app monitor components."""

from __future__ import annotations

from fastapi import Request, WebSocket

from exam_monitor.services.handler import ConnectionHandler
from exam_monitor.services.registry import SessionRegistry
from exam_monitor.services.sweeper import LivenessSweeper


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_sweeper(request: Request) -> LivenessSweeper:
    return request.app.state.sweeper


def get_connection_handler(websocket: WebSocket) -> ConnectionHandler:
    return websocket.app.state.connection_handler
