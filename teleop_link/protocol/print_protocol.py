from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from teleop_link.protocol.types import TransportClosed, TransportHandlers


@dataclass
class PrintOnlyTransport:
    """
    Dry-run transport: "connects" instantly and prints each payload as a line.
    """
    prefix: str = "TX :"
    count: int = 0
    _open: bool = False
    _handlers: Optional[TransportHandlers] = None

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self, handlers: TransportHandlers) -> None:
        self._handlers = handlers
        self._open = True
        handlers.on_open()

    def send(self, text: str) -> None:
        if not self._open:
            raise TransportClosed("print transport is closed")
        self.count += 1
        print(self.prefix, text)

    def close(self) -> None:
        self._open = False
        self._handlers = None

    async def wait_closed(self) -> None:
        return None
