import logging
from typing import Optional

# ----------------------------
# Utilities
# ----------------------------
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def parse_bool(v: str) -> bool:
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def clamp(n: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, n))


def apply_deadzone(x: float, deadzone: float) -> float:
    """
    Zero anything below the deadzone, clamp the rest to -1.0..1.0.

    Returns positive zero for neutral so -0.0 never leaks into payloads.
    """
    if abs(x) < deadzone:
        return 0.0
    return clamp(x, -1.0, 1.0)


def invert(x: float) -> float:
    return 0.0 if x == 0 else -x


def _escape_text(s: str, max_len: int = 240) -> str:
    if len(s) > max_len:
        s = s[:max_len] + "..."
    return s.replace("\n", "\\n").replace("\r", "\\r")


def setup_logging(level: str = "INFO", *, quiet: Optional[list[str]] = None) -> None:
    """
    Configure root logging once for a runner.

    `quiet` lists third-party loggers to cap at WARNING (websockets is chatty at DEBUG).
    """
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    for name in quiet or ["websockets"]:
        logging.getLogger(name).setLevel(logging.WARNING)
