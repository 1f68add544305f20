from __future__ import annotations
import json
import math
from dataclasses import asdict, dataclass
from typing import Any, Callable, ClassVar, Dict, Optional, Protocol

from teleop_link.scheduling import PeriodicTask

AXES = ("lx", "ly", "rx", "ry")


@dataclass(frozen=True)
class ControlVector:
    """
    Canonical control sample sent over the link.

    Conventions:
      - lx, ly: translation intent
      - rx, ry: rotation intent
      - every axis in [-1.0, 1.0]; equality is exact per component
    """
    lx: float = 0.0
    ly: float = 0.0
    rx: float = 0.0
    ry: float = 0.0

    NEUTRAL: ClassVar["ControlVector"]

    def __post_init__(self) -> None:
        for name in AXES:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value) or not -1.0 <= value <= 1.0:
                raise ValueError(f"{name} out of range [-1, 1]: {value!r}")
            object.__setattr__(self, name, float(value))

    def to_payload(self) -> Dict[str, float]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), separators=(",", ":"))

    @classmethod
    def from_payload(cls, obj: Any) -> "ControlVector":
        if not isinstance(obj, dict):
            raise ValueError(f"expected a JSON object, got {type(obj).__name__}")
        missing = [k for k in AXES if k not in obj]
        if missing:
            raise ValueError(f"missing axes: {missing}")
        return cls(**{k: obj[k] for k in AXES})

    @classmethod
    def from_json(cls, text: str) -> "ControlVector":
        try:
            obj = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid json: {e}") from e
        return cls.from_payload(obj)


ControlVector.NEUTRAL = ControlVector()

VectorSink = Callable[[ControlVector], None]


class InputHandle(Protocol):
    def detach(self) -> None: ...


class InputSource(Protocol):
    """
    Anything that produces ControlVector samples once mounted.

    mount() starts sampling into `sink` and returns the handle that stops it.
    """
    name: str

    def mount(self, sink: VectorSink) -> InputHandle: ...


class SamplerHandle:
    """
    Handle returned by the built-in sources: cancels the sampling timer and
    releases the source's bindings. Safe to call more than once.
    """
    def __init__(self, timer: Optional[PeriodicTask], on_detach: Optional[Callable[[], None]] = None) -> None:
        self._timer = timer
        self._on_detach = on_detach

    @property
    def active(self) -> bool:
        return self._timer is not None

    def detach(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._on_detach is not None:
            on_detach, self._on_detach = self._on_detach, None
            on_detach()
