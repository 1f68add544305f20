"""
Websocket transport for the control link.

One WebSocketTransport is one connection attempt. The manager creates a fresh
instance per attempt and throws it away on close, so there is no reconnect
logic in here.

Outbound text goes through a queue drained by a single writer task, which keeps
payloads in submission order without making send() a coroutine.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException

from teleop_link.protocol.types import (
    Message,
    TransportClosed,
    TransportError,
    TransportHandlers,
    TransportOpenFailure,
    TransportRuntimeError,
)
from teleop_link.utils import _escape_text

logger = logging.getLogger(__name__)


class WebSocketTransport:
    def __init__(
        self,
        url: str,
        *,
        open_timeout_s: float = 5.0,
        ping_interval_s: Optional[float] = 5.0,
        ping_timeout_s: Optional[float] = 10.0,
        log_tx: bool = False,
        log_rx: bool = True,
    ) -> None:
        self.url = url
        self.open_timeout_s = open_timeout_s
        self.ping_interval_s = ping_interval_s
        self.ping_timeout_s = ping_timeout_s
        self.log_tx = log_tx
        self.log_rx = log_rx

        self._handlers: Optional[TransportHandlers] = None
        self._ws: Optional[ClientConnection] = None
        self._task: Optional[asyncio.Task] = None
        self._outbox: "asyncio.Queue[str]" = asyncio.Queue()
        self._closing = False
        self._close_task: Optional[asyncio.Task] = None
        self._broken = False

    @property
    def is_open(self) -> bool:
        return self._ws is not None and not self._closing and not self._broken

    def open(self, handlers: TransportHandlers) -> None:
        if self._task is not None:
            raise RuntimeError("WebSocketTransport.open() called twice")
        self._handlers = handlers
        logger.info("Connecting to %s ...", self.url)
        self._task = asyncio.get_running_loop().create_task(self._run(), name=f"ws-link {self.url}")

    def send(self, text: str) -> None:
        if not self.is_open:
            raise TransportClosed(f"not connected to {self.url}")
        if self.log_tx:
            logger.debug("TX : %s", _escape_text(text))
        self._outbox.put_nowait(text)

    def close(self) -> None:
        if self._closing:
            return
        self._closing = True
        self._handlers = None
        if self._ws is not None:
            self._close_task = asyncio.get_running_loop().create_task(self._ws.close())
        elif self._task is not None:
            self._task.cancel()

    async def wait_closed(self) -> None:
        """Wait until the close handshake started by close() has finished."""
        pending = [t for t in (self._close_task, self._task) if t is not None]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _run(self) -> None:
        try:
            ws = await connect(
                self.url,
                open_timeout=self.open_timeout_s,
                ping_interval=self.ping_interval_s,
                ping_timeout=self.ping_timeout_s,
            )
        except (OSError, TimeoutError, WebSocketException) as e:
            self._finish(TransportOpenFailure(f"{self.url}: {e!r}"))
            return

        if self._closing:
            # close() raced the handshake; nobody is listening anymore
            await ws.close()
            return

        self._ws = ws
        writer = asyncio.get_running_loop().create_task(self._write_loop(ws))
        self._notify_open()

        error: Optional[TransportError] = None
        try:
            async for message in ws:
                self._notify_message(message)
        except ConnectionClosedError as e:
            error = TransportRuntimeError(f"{self.url}: {e!r}")
        finally:
            writer.cancel()
            self._ws = None
        self._finish(error)

    async def _write_loop(self, ws: ClientConnection) -> None:
        while True:
            text = await self._outbox.get()
            try:
                await ws.send(text)
            except ConnectionClosed as e:
                # the reader loop sees the same close and reports it
                logger.warning("send failed, connection closed: %r", e)
                return
            except Exception as e:
                logger.error("writer failed, closing %s: %r", self.url, e)
                self._broken = True
                # 1011: internal error; the reader reports the close
                await ws.close(1011, "writer failed")
                return

    def _notify_open(self) -> None:
        if self._handlers is not None:
            self._handlers.on_open()

    def _notify_message(self, message: Message) -> None:
        if self.log_rx:
            shown = message if isinstance(message, str) else f"<{len(message)} bytes>"
            logger.info("Received: %s", _escape_text(shown))
        if self._handlers is not None:
            self._handlers.on_message(message)

    def _finish(self, error: Optional[TransportError]) -> None:
        handlers, self._handlers = self._handlers, None
        if handlers is not None and not self._closing:
            handlers.on_close(error)
