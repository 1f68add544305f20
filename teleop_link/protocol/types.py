from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Union


class TransportError(Exception):
    """Base for everything that ends a session. The manager treats all kinds alike."""


class TransportOpenFailure(TransportError):
    """The connection could not be established."""


class TransportRuntimeError(TransportError):
    """An established connection failed."""


class TransportClosed(TransportError):
    """The connection is closed (or was never open)."""


Message = Union[str, bytes]


@dataclass(frozen=True)
class TransportHandlers:
    on_open: Callable[[], None]
    on_message: Callable[[Message], None]
    on_close: Callable[[Optional[TransportError]], None]


class Transport(Protocol):
    """
    One persistent duplex connection.

    open() starts connecting and reports through `handlers`; it may call them
    synchronously. on_close(None) is a clean close, anything else an error.
    Handlers are not called after close(). wait_closed() returns once a
    close() has fully gone out on the wire.
    """
    @property
    def is_open(self) -> bool: ...

    def open(self, handlers: TransportHandlers) -> None: ...

    def send(self, text: str) -> None: ...

    def close(self) -> None: ...

    async def wait_closed(self) -> None: ...
