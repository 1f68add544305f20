"""
Device-side end of the control link.

ControlReceiver accepts operator connections on the well-known websocket path
and keeps only the most recent ControlVector. The drive loop of the device
reads it with ControllerState.get_latest() from whatever thread it runs on.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosedError

from teleop_link.controllers.types import ControlVector
from teleop_link.utils import _escape_text

logger = logging.getLogger(__name__)

# 1008: policy violation
CLOSE_UNKNOWN_PATH = 1008


class ControllerState:
    """Latest-wins holder for the last command received from any client."""
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last = ControlVector.NEUTRAL
        self._updates = 0

    def update(self, command: ControlVector) -> None:
        with self._lock:
            self._last = command
            self._updates += 1

    def get_latest(self) -> ControlVector:
        with self._lock:
            return self._last

    @property
    def updates(self) -> int:
        with self._lock:
            return self._updates


class ControlReceiver:
    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 8080,
        *,
        path: str = "/ws/",
        ping_interval_s: Optional[float] = 5.0,
        client_timeout_s: Optional[float] = 10.0,
        state: Optional[ControllerState] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.path = path
        self.ping_interval_s = ping_interval_s
        self.client_timeout_s = client_timeout_s
        self.state = state or ControllerState()

    def handle_text(self, text: str) -> bool:
        try:
            command = ControlVector.from_json(text)
        except ValueError as e:
            logger.error("Failed to parse json %s (%s)", _escape_text(text), e)
            return False
        self.state.update(command)
        return True

    def listen(self):
        """
        Server context manager:

            async with receiver.listen() as server:
                await server.serve_forever()
        """
        return serve(
            self._handle_connection,
            self.host,
            self.port,
            ping_interval=self.ping_interval_s,
            ping_timeout=self.client_timeout_s,
        )

    async def run_forever(self) -> None:
        async with self.listen() as server:
            logger.info("Receiver listening on ws://%s:%d%s", self.host, bound_port(server), self.path)
            await server.serve_forever()

    async def _handle_connection(self, ws: ServerConnection) -> None:
        if _normalize_path(ws.request.path) != _normalize_path(self.path):
            logger.warning("rejecting connection on unknown path %s", ws.request.path)
            await ws.close(CLOSE_UNKNOWN_PATH, "unknown path")
            return

        logger.info("new websocket connection from %s", ws.remote_address)
        try:
            async for message in ws:
                if isinstance(message, str):
                    self.handle_text(message)
                else:
                    logger.error("Unknown message type: binary frame of %d bytes", len(message))
        except ConnectionClosedError as e:
            logger.error("websocket error: %s", e)
        logger.info("User connection ended")


def bound_port(server: Server) -> int:
    return next(iter(server.sockets)).getsockname()[1]


def _normalize_path(path: str) -> str:
    return path.split("?", 1)[0].rstrip("/") or "/"
