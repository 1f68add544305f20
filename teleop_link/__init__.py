"""Operator-side control link: input sampling, coalescing and a self-healing websocket."""

__version__ = "0.1.0"
