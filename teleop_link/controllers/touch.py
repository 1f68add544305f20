"""
Dual virtual joystick input.

Two on-screen sticks: the left one drives translation, the right one rotation.
A UI layer feeds them start/move/end events; the sampler reads both every tick
and emits the combined vector.
"""

from __future__ import annotations

import logging
from typing import Optional

from teleop_link.controllers.types import SamplerHandle, VectorSink
from teleop_link.drive.mapping import check_deadzone, combine, polar_to_axes
from teleop_link.scheduling import Scheduler

logger = logging.getLogger(__name__)


class VirtualJoystick:
    """
    One on-screen stick.

    move() takes the polar offset reported by the widget: angle in radians and
    distance normalized to the stick radius (0..1). Events are ignored while
    the stick is not bound to a mounted source.
    """
    def __init__(self, name: str, deadzone: float = 0.05) -> None:
        self.name = name
        self.deadzone = check_deadzone(deadzone)
        self.x = 0.0
        self.y = 0.0
        self.bound = False

    @property
    def position(self) -> "tuple[float, float]":
        return self.x, self.y

    def bind(self) -> None:
        self.bound = True
        self._reset()

    def release(self) -> None:
        self.bound = False
        self._reset()

    def start(self) -> None:
        if self.bound:
            self._reset()

    def move(self, angle_rad: float, distance: float) -> None:
        if self.bound:
            self.x, self.y = polar_to_axes(angle_rad, distance, self.deadzone)

    def end(self) -> None:
        if self.bound:
            self._reset()

    def _reset(self) -> None:
        self.x = 0.0
        self.y = 0.0


class DualJoystickSampler:
    name = "touch"

    def __init__(
        self,
        move: Optional[VirtualJoystick],
        rotation: Optional[VirtualJoystick],
        scheduler: Scheduler,
        *,
        interval_s: float = 0.05,
    ) -> None:
        self.move = move
        self.rotation = rotation
        self.scheduler = scheduler
        self.interval_s = interval_s

    def mount(self, sink: VectorSink) -> SamplerHandle:
        if self.move is None or self.rotation is None:
            missing = [n for n, w in (("move", self.move), ("rotation", self.rotation)) if w is None]
            logger.warning("touch joystick missing (%s); touch input disabled", ", ".join(missing))
            return SamplerHandle(None)

        self.move.bind()
        self.rotation.bind()
        timer = self.scheduler.call_every(self.interval_s, lambda: self.sample(sink))
        return SamplerHandle(timer, on_detach=self._release)

    def sample(self, sink: VectorSink) -> None:
        sink(combine(self.move.position, self.rotation.position))

    def _release(self) -> None:
        self.move.release()
        self.rotation.release()
