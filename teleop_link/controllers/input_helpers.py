from __future__ import annotations
import logging
from typing import Callable, Dict, Hashable, Optional

logger = logging.getLogger(__name__)


class EdgeDetector:
    """
    Tracks button rising edges so actions fire once per press.
    """
    def __init__(self) -> None:
        self._prev: Dict[Hashable, bool] = {}

    def rising(self, key: Hashable, current: bool) -> bool:
        prev = self._prev.get(key, False)
        self._prev[key] = current
        return (not prev) and current

    def reset(self) -> None:
        self._prev.clear()


class ButtonBindings:
    """
    Gamepad button index -> action, fired on the press edge.

    Usage:
      b = ButtonBindings()
      b.bind(9, toggle.toggle)
      b.process(buttons)  # runs the bound action once per press
    """
    def __init__(self) -> None:
        self.detector = EdgeDetector()
        self._bindings: Dict[int, Callable[[], None]] = {}

    def bind(self, index: int, action: Callable[[], None]) -> None:
        self._bindings[index] = action

    def process(self, buttons: "tuple[bool, ...]") -> None:
        for index, action in self._bindings.items():
            pressed = index < len(buttons) and bool(buttons[index])
            if self.detector.rising(index, pressed):
                action()

    def reset(self) -> None:
        self.detector.reset()


class FullscreenToggle:
    """
    Fullscreen state shared by the on-screen button and the gamepad button.

    The actual window change is up to `on_change`; this only keeps the flag.
    """
    def __init__(self, on_change: Optional[Callable[[bool], None]] = None) -> None:
        self.fullscreen = False
        self.on_change = on_change

    def toggle(self) -> bool:
        self.fullscreen = not self.fullscreen
        logger.info("fullscreen -> %s", "on" if self.fullscreen else "off")
        if self.on_change is not None:
            self.on_change(self.fullscreen)
        return self.fullscreen
