"""Exam Monitor: session liveness tracking over WebSockets."""

__version__ = "0.1.0"
