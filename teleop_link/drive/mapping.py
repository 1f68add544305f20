from __future__ import annotations
import math
from typing import Sequence, Tuple

from teleop_link.utils import apply_deadzone, clamp, invert
from teleop_link.controllers.types import AXES, ControlVector


def check_deadzone(deadzone: float) -> float:
    if not 0.0 <= deadzone < 1.0:
        raise ValueError(f"deadzone must be in [0, 1), got {deadzone!r}")
    return deadzone


def normalize(vector: ControlVector, deadzone: float) -> ControlVector:
    """
    Apply the deadzone to every axis. Idempotent: normalize(normalize(v)) == normalize(v).
    """
    check_deadzone(deadzone)
    return ControlVector(**{k: apply_deadzone(getattr(vector, k), deadzone) for k in AXES})


def _axis(axes: Sequence[float], idx: int) -> float:
    return float(axes[idx]) if idx < len(axes) else 0.0


def gamepad_to_vector(axes: Sequence[float], deadzone: float) -> ControlVector:
    """
    Standard-layout gamepad axes -> ControlVector.

    The mapping is part of the control contract with the steered device:
      axes[1] (left stick Y)  -> lx
      axes[0] (left stick X)  -> ly
      axes[3] (right stick Y) -> rx
      axes[2] (right stick X) -> ry
    Deadzone is applied on the raw reading, the sign flip on emission.
    """
    check_deadzone(deadzone)
    return ControlVector(
        lx=invert(apply_deadzone(_axis(axes, 1), deadzone)),
        ly=invert(apply_deadzone(_axis(axes, 0), deadzone)),
        rx=invert(apply_deadzone(_axis(axes, 3), deadzone)),
        ry=invert(apply_deadzone(_axis(axes, 2), deadzone)),
    )


def polar_to_axes(angle_rad: float, distance: float, deadzone: float) -> Tuple[float, float]:
    """
    Virtual stick offset -> (x, y).

    `distance` is in normalized stick units (0 at center, 1 at the rim).
    Screen-down is negative world-forward, hence the flipped cosine.
    """
    size = clamp(distance, 0.0, 1.0)
    if size < deadzone:
        return 0.0, 0.0
    x = math.sin(angle_rad) * size
    y = -math.cos(angle_rad) * size
    return x + 0.0, y + 0.0


def combine(move: Tuple[float, float], rotation: Tuple[float, float]) -> ControlVector:
    return ControlVector(lx=move[0], ly=move[1], rx=rotation[0], ry=rotation[1])
