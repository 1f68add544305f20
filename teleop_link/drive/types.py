from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Any, Dict

from teleop_link.utils import parse_bool


@dataclass(frozen=True)
class LinkConfig:
    """
    Runtime behavior of the control link.

    reconnect_interval_s:
      Watchdog period. A new connection is attempted on every tick while disconnected.
    sample_interval_s:
      Cadence of both input sources (gamepad poll, virtual joystick sampling).
    coalesce_interval_s:
      At most one transmission per interval; the latest value wins.
    gamepad_deadzone / touch_deadzone:
      Axis magnitude (gamepad) or normalized stick distance (touch) below which input is neutral.
    connect_timeout_s:
      How long an attempt may stay CONNECTING before the watchdog abandons it.
    """
    url: str = "ws://127.0.0.1:8080/ws/"

    reconnect_interval_s: float = 1.0
    sample_interval_s: float = 0.05
    coalesce_interval_s: float = 0.1

    gamepad_deadzone: float = 0.2
    touch_deadzone: float = 0.05
    fullscreen_button: int = 9

    connect_timeout_s: float = 5.0
    ping_interval_s: float = 5.0
    ping_timeout_s: float = 10.0

    log_tx: bool = False
    log_rx: bool = True

    def __post_init__(self) -> None:
        for name in ("reconnect_interval_s", "sample_interval_s", "coalesce_interval_s", "connect_timeout_s"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")
        for name in ("gamepad_deadzone", "touch_deadzone"):
            value = getattr(self, name)
            if not 0.0 <= value < 1.0:
                raise ValueError(f"{name} must be in [0, 1), got {value!r}")
        if self.fullscreen_button < 0:
            raise ValueError(f"fullscreen_button must be >= 0, got {self.fullscreen_button!r}")

    def with_overrides(self, overrides: Dict[str, Any]) -> "LinkConfig":
        known = {f.name: f.type for f in fields(self)}
        unknown = sorted(set(overrides) - set(known))
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}")

        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for key, value in overrides.items():
            current = values[key]
            # keep field types stable when YAML hands us ints for floats
            if isinstance(current, bool):
                values[key] = parse_bool(value) if isinstance(value, str) else bool(value)
            elif isinstance(current, float):
                values[key] = float(value)
            elif isinstance(current, int):
                values[key] = int(value)
            else:
                values[key] = str(value)
        return LinkConfig(**values)
