"""
Shared fakes: a manual clock scheduler and an in-memory transport.

No sockets, no sleeping: tests advance time explicitly.
"""

from __future__ import annotations

import json
import os
from typing import Callable, List, Optional

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

from teleop_link.controllers.types import ControlVector  # noqa: E402
from teleop_link.protocol.types import (  # noqa: E402
    TransportClosed,
    TransportError,
    TransportHandlers,
    TransportOpenFailure,
)


class ManualTask:
    def __init__(self, seq: int, due: float, interval_s: float, callback: Callable[[], None]) -> None:
        self.seq = seq
        self.due = due
        self.interval_s = interval_s
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        self._active = False


class ManualScheduler:
    """Runs periodic callbacks in due-time order as time is advanced by hand."""

    def __init__(self) -> None:
        self.now = 0.0
        self.tasks: List[ManualTask] = []
        self._seq = 0

    def time(self) -> float:
        return self.now

    def call_every(self, interval_s: float, callback: Callable[[], None]) -> ManualTask:
        self._seq += 1
        task = ManualTask(self._seq, round(self.now + interval_s, 9), interval_s, callback)
        self.tasks.append(task)
        return task

    def advance(self, seconds: float) -> None:
        end = round(self.now + seconds, 9)
        while True:
            due = [t for t in self.tasks if t.active and t.due <= end]
            if not due:
                break
            task = min(due, key=lambda t: (t.due, t.seq))
            self.now = task.due
            task.due = round(task.due + task.interval_s, 9)
            task.callback()
        self.now = end
        self.tasks = [t for t in self.tasks if t.active]

    def active_tasks(self) -> List[ManualTask]:
        return [t for t in self.tasks if t.active]


class FakeTransport:
    """
    mode:
      "open"    - opens synchronously inside open()
      "fail"    - reports an open failure synchronously
      "pending" - waits until the test calls accept() / reject()
    """

    def __init__(self, mode: str = "open") -> None:
        self.mode = mode
        self.handlers: Optional[TransportHandlers] = None
        self.sent: List[str] = []
        self.closed = False
        self._open = False
        self.refuse_sends = False
        self.waited = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self, handlers: TransportHandlers) -> None:
        self.handlers = handlers
        if self.mode == "open":
            self.accept()
        elif self.mode == "fail":
            handlers.on_close(TransportOpenFailure("connection refused"))

    def accept(self) -> None:
        self._open = True
        self.handlers.on_open()

    def reject(self) -> None:
        self.handlers.on_close(TransportOpenFailure("connection refused"))

    def drop(self, error: Optional[TransportError] = None) -> None:
        self._open = False
        self.handlers.on_close(error)

    def deliver(self, message: str) -> None:
        self.handlers.on_message(message)

    def send(self, text: str) -> None:
        if not self._open or self.refuse_sends:
            raise TransportClosed("fake transport not writable")
        self.sent.append(text)

    def close(self) -> None:
        self.closed = True
        self._open = False

    async def wait_closed(self) -> None:
        self.waited = True

    @property
    def vectors(self) -> List[ControlVector]:
        return [ControlVector.from_payload(json.loads(s)) for s in self.sent]


class FakeTransportFactory:
    """Hands out FakeTransports; the first `fail_first` of them refuse to open."""

    def __init__(self, mode: str = "open", fail_first: int = 0) -> None:
        self.mode = mode
        self.fail_first = fail_first
        self.created: List[FakeTransport] = []

    def __call__(self) -> FakeTransport:
        mode = "fail" if len(self.created) < self.fail_first else self.mode
        transport = FakeTransport(mode)
        self.created.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.created[-1]

    def all_sent(self) -> List[str]:
        return [s for t in self.created for s in t.sent]


class RecordingSink:
    def __init__(self) -> None:
        self.vectors: List[ControlVector] = []

    def __call__(self, vector: ControlVector) -> None:
        self.vectors.append(vector)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def transports() -> FakeTransportFactory:
    return FakeTransportFactory()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
