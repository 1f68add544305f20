from __future__ import annotations
from typing import Optional, Protocol

from teleop_link.controllers.input_helpers import ButtonBindings
from teleop_link.controllers.types import SamplerHandle, VectorSink
from teleop_link.drive.mapping import check_deadzone, gamepad_to_vector
from teleop_link.scheduling import Scheduler


class GamepadDevice(Protocol):
    # returns a RawGamepadState-like object (axes, buttons) or None when no pad is present
    def poll(self): ...


class GamepadSampler:
    """
    Polls the gamepad every `interval_s` and emits one ControlVector per reading.

    Button edges (fullscreen etc.) are handled next to, but independently from,
    axis emission: a held button fires its binding once.
    """
    name = "gamepad"

    def __init__(
        self,
        device: GamepadDevice,
        scheduler: Scheduler,
        *,
        interval_s: float = 0.05,
        deadzone: float = 0.2,
        buttons: Optional[ButtonBindings] = None,
    ) -> None:
        self.device = device
        self.scheduler = scheduler
        self.interval_s = interval_s
        self.deadzone = check_deadzone(deadzone)
        self.buttons = buttons or ButtonBindings()

    def mount(self, sink: VectorSink) -> SamplerHandle:
        timer = self.scheduler.call_every(self.interval_s, lambda: self.sample(sink))
        return SamplerHandle(timer, on_detach=self.buttons.reset)

    def sample(self, sink: VectorSink) -> bool:
        st = self.device.poll()
        if st is None:
            return False

        sink(gamepad_to_vector(st.axes, self.deadzone))
        self.buttons.process(st.buttons)
        return True
