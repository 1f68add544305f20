"""
TeleopClient - canonical runner for the operator side of the control link.

How to run:
- `python -m teleop_link.main`, or the `teleop-link` console script.
- Configure with env vars (see teleop_link/config.py) or a YAML file named by
  TELEOP_CONFIG. DRY_RUN=1 prints payloads instead of opening a websocket.

High-level responsibilities:
- Poll the gamepad, and sample the virtual joysticks when a UI feeds them (TOUCH_INPUT=1).
- Gate, coalesce and send ControlVectors over the websocket.
- Keep reconnecting for as long as the process runs.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Callable, List, Optional

from teleop_link import config
from teleop_link.connection import ConnectionManager, ConnectionState
from teleop_link.controllers.gamepad import GamepadDevice, GamepadSampler
from teleop_link.controllers.input_helpers import ButtonBindings, FullscreenToggle
from teleop_link.controllers.touch import DualJoystickSampler, VirtualJoystick
from teleop_link.controllers.types import InputSource
from teleop_link.controllers.xbox_pygame import PygameGamepad
from teleop_link.drive.types import LinkConfig
from teleop_link.protocol.print_protocol import PrintOnlyTransport
from teleop_link.protocol.types import Transport
from teleop_link.protocol.ws_transport import WebSocketTransport
from teleop_link.scheduling import AsyncioScheduler, Scheduler
from teleop_link.utils import setup_logging

logger = logging.getLogger(__name__)


def transport_factory(cfg: LinkConfig, *, dry_run: bool = False) -> Callable[[], Transport]:
    if dry_run:
        return PrintOnlyTransport

    def make() -> Transport:
        return WebSocketTransport(
            cfg.url,
            open_timeout_s=cfg.connect_timeout_s,
            ping_interval_s=cfg.ping_interval_s,
            ping_timeout_s=cfg.ping_timeout_s,
            log_tx=cfg.log_tx,
            log_rx=cfg.log_rx,
        )

    return make


class TeleopClient:
    """
    Wires input sources, the connection manager and the fullscreen toggle together.

    move_stick / rotate_stick are plain state holders: a UI layer owns the
    on-screen widgets and forwards their start/move/end events to them. Pass
    touch=True only when such a layer is attached; otherwise the touch source is
    left out and the gamepad is the only input.
    """

    def __init__(self, cfg: LinkConfig, *, dry_run: bool = False, touch: bool = False) -> None:
        self.cfg = cfg
        self.dry_run = dry_run
        self.touch = touch

        self.fullscreen = FullscreenToggle()
        self.move_stick = VirtualJoystick("move", deadzone=cfg.touch_deadzone)
        self.rotate_stick = VirtualJoystick("rotate", deadzone=cfg.touch_deadzone)

        self.gamepad: Optional[PygameGamepad] = None
        self.manager: Optional[ConnectionManager] = None

    def sources(self, scheduler: Scheduler, gamepad: GamepadDevice) -> List[InputSource]:
        buttons = ButtonBindings()
        buttons.bind(self.cfg.fullscreen_button, self.fullscreen.toggle)

        sources: List[InputSource] = [
            GamepadSampler(
                gamepad,
                scheduler,
                interval_s=self.cfg.sample_interval_s,
                deadzone=self.cfg.gamepad_deadzone,
                buttons=buttons,
            ),
        ]
        if self.touch:
            sources.append(DualJoystickSampler(
                self.move_stick,
                self.rotate_stick,
                scheduler,
                interval_s=self.cfg.sample_interval_s,
            ))
        return sources

    def build(self, scheduler: AsyncioScheduler) -> ConnectionManager:
        self.gamepad = PygameGamepad()
        self.manager = ConnectionManager(
            transport_factory(self.cfg, dry_run=self.dry_run),
            scheduler,
            self.sources(scheduler, self.gamepad),
            config=self.cfg,
            on_state_change=self._state_changed,
        )
        return self.manager

    async def run(self) -> None:
        manager = self.build(AsyncioScheduler())
        manager.start()
        try:
            # everything else happens in scheduler callbacks
            await asyncio.Event().wait()
        finally:
            manager.shutdown()
            await manager.wait_closed(config.CLOSE_TIMEOUT_S)
            if self.gamepad is not None:
                self.gamepad.close()

    def _state_changed(self, old: ConnectionState, new: ConnectionState) -> None:
        if new is ConnectionState.CONNECTED:
            print(f"Link up: {self.cfg.url}")
        elif old is ConnectionState.CONNECTED:
            print("Link down, retrying...")


def main() -> None:
    setup_logging(config.LOG_LEVEL)
    cfg = config.link_config()

    print("===== teleop link starting =====")
    print("PID:", os.getpid())
    print(f"Server: {'(dry run)' if config.DRY_RUN else cfg.url}")
    print("Ctrl+C to exit.\n")

    client = TeleopClient(cfg, dry_run=config.DRY_RUN, touch=config.TOUCH_INPUT)
    try:
        asyncio.run(client.run())
    except KeyboardInterrupt:
        print("\nStopped.")


if __name__ == "__main__":
    main()
