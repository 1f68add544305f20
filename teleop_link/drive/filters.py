from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from teleop_link.controllers.types import ControlVector
from teleop_link.scheduling import PeriodicTask, Scheduler

logger = logging.getLogger(__name__)


@dataclass
class ChangeGate:
    """
    Drops a sample identical to the last one let through.

    Starts from NEUTRAL so an idle source never sends its resting position.
    """
    last: ControlVector = ControlVector.NEUTRAL

    def admit(self, candidate: ControlVector) -> bool:
        if candidate == self.last:
            return False
        self.last = candidate
        return True


class Coalescer:
    """
    Trailing-edge rate limiter for outbound vectors.

    - idle: the first submit is transmitted immediately and starts a repeating timer
    - timer running: submits overwrite a single pending slot (last write wins)
    - each tick transmits the pending value, or stops the timer when there is none

    One instance per connection. discard() drops the pending value without sending it.
    """
    def __init__(
        self,
        send: Callable[[ControlVector], None],
        scheduler: Scheduler,
        interval_s: float = 0.1,
    ) -> None:
        if interval_s <= 0:
            raise ValueError(f"interval_s must be positive, got {interval_s!r}")
        self._send = send
        self._scheduler = scheduler
        self.interval_s = interval_s

        self.pending: Optional[ControlVector] = None
        self._timer: Optional[PeriodicTask] = None
        self._discarded = False

    @property
    def timer_active(self) -> bool:
        return self._timer is not None and self._timer.active

    @property
    def discarded(self) -> bool:
        return self._discarded

    def submit(self, vector: ControlVector) -> None:
        if self._discarded:
            logger.debug("submit after discard ignored: %s", vector)
            return

        if self._timer is None:
            logger.debug("sending first")
            self._send(vector)
            self._timer = self._scheduler.call_every(self.interval_s, self._on_interval)
        else:
            self.pending = vector

    def discard(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self.pending is not None:
            logger.debug("dropping pending %s", self.pending)
        self.pending = None
        self._discarded = True

    def _on_interval(self) -> None:
        if self.pending is not None:
            vector, self.pending = self.pending, None
            self._send(vector)
            return

        logger.debug("clearing interval")
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
