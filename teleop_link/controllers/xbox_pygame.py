from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawGamepadState:
    """
    One raw reading in the device's own layout (standard mapping on most pads):
    axes[0]/[1] left stick X/Y, axes[2]/[3] right stick X/Y, up is -1.0.
    """
    index: int
    axes: Tuple[float, ...]
    buttons: Tuple[bool, ...]


class PygameGamepad:
    """
    Optional gamepad handle over pygame's joystick module.

    poll() answers with the first connected pad, or None when there is none.
    A missing or unplugged pad is a normal state, not an error.
    """
    def __init__(self) -> None:
        pygame.init()
        pygame.joystick.init()
        self._js: Optional["pygame.joystick.JoystickType"] = None

    def poll(self) -> Optional[RawGamepadState]:
        try:
            pygame.event.pump()
            if pygame.joystick.get_count() == 0:
                if self._js is not None:
                    logger.info("gamepad disconnected")
                self._js = None
                return None

            if self._js is None:
                self._js = pygame.joystick.Joystick(0)
                self._js.init()
                logger.info(
                    "gamepad connected: %s (axes=%d buttons=%d)",
                    self._js.get_name(), self._js.get_numaxes(), self._js.get_numbuttons(),
                )

            js = self._js
            axes = tuple(float(js.get_axis(i)) for i in range(js.get_numaxes()))
            buttons = tuple(bool(js.get_button(i)) for i in range(js.get_numbuttons()))
            return RawGamepadState(index=js.get_instance_id(), axes=axes, buttons=buttons)
        except pygame.error as e:
            logger.debug("gamepad read failed: %s", e)
            self._js = None
            return None

    def close(self) -> None:
        self._js = None
        pygame.joystick.quit()
