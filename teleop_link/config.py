from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml

from teleop_link.drive.types import LinkConfig
from teleop_link.utils import parse_bool


def env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return parse_bool(v)


def env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    return default if v is None else int(v)


def env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    return default if v is None else float(v)


def env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None else v


# ============================
# Link / Transport
# ============================
TELEOP_HOST = env_str("TELEOP_HOST", "127.0.0.1:8080")
WS_PATH = env_str("WS_PATH", "/ws/")
TELEOP_URL = env_str("TELEOP_URL", f"ws://{TELEOP_HOST}{WS_PATH}")

CONNECT_TIMEOUT_S = env_float("CONNECT_TIMEOUT_S", 5.0)
PING_INTERVAL_S = env_float("PING_INTERVAL_S", 5.0)
PING_TIMEOUT_S = env_float("PING_TIMEOUT_S", 10.0)
CLOSE_TIMEOUT_S = env_float("CLOSE_TIMEOUT_S", 1.0)

LOG_TX = env_bool("LOG_TX", False)
LOG_RX = env_bool("LOG_RX", True)
LOG_LEVEL = env_str("LOG_LEVEL", "INFO")

DRY_RUN = env_bool("DRY_RUN", False)

# ============================
# Timing contract
# ============================
RECONNECT_INTERVAL_S = env_float("RECONNECT_INTERVAL_S", 1.0)
SAMPLE_INTERVAL_S = env_float("SAMPLE_INTERVAL_S", 0.05)
COALESCE_INTERVAL_S = env_float("COALESCE_INTERVAL_S", 0.1)

# ============================
# Input
# ============================
GAMEPAD_DEADZONE = env_float("GAMEPAD_DEADZONE", 0.2)
TOUCH_DEADZONE = env_float("TOUCH_DEADZONE", 0.05)
FULLSCREEN_BUTTON = env_int("FULLSCREEN_BUTTON", 9)
# on-screen sticks need a UI layer feeding them events
TOUCH_INPUT = env_bool("TOUCH_INPUT", False)

# ============================
# Receiver (device side)
# ============================
RECEIVER_HOST = env_str("RECEIVER_HOST", "0.0.0.0")
RECEIVER_PORT = env_int("RECEIVER_PORT", 8080)
RECEIVER_PING_INTERVAL_S = env_float("RECEIVER_PING_INTERVAL_S", 5.0)
RECEIVER_CLIENT_TIMEOUT_S = env_float("RECEIVER_CLIENT_TIMEOUT_S", 10.0)

# ============================
# Collaborators (one-shot HTTP)
# ============================
HTTP_BASE_URL = env_str("HTTP_BASE_URL", f"http://{TELEOP_HOST}")
HTTP_TIMEOUT_S = env_float("HTTP_TIMEOUT_S", 2.0)
MAP_SIZE_PATH = env_str("MAP_SIZE_PATH", "/map_size")

CONFIG_FILE = env_str("TELEOP_CONFIG", "")


def link_config(config_file: Optional[str] = None) -> LinkConfig:
    """
    Build the LinkConfig from the env constants above, then apply the YAML
    overrides from `config_file` (or TELEOP_CONFIG) when one is given.
    """
    cfg = LinkConfig(
        url=TELEOP_URL,
        reconnect_interval_s=RECONNECT_INTERVAL_S,
        sample_interval_s=SAMPLE_INTERVAL_S,
        coalesce_interval_s=COALESCE_INTERVAL_S,
        gamepad_deadzone=GAMEPAD_DEADZONE,
        touch_deadzone=TOUCH_DEADZONE,
        fullscreen_button=FULLSCREEN_BUTTON,
        connect_timeout_s=CONNECT_TIMEOUT_S,
        ping_interval_s=PING_INTERVAL_S,
        ping_timeout_s=PING_TIMEOUT_S,
        log_tx=LOG_TX,
        log_rx=LOG_RX,
    )

    path = config_file if config_file is not None else CONFIG_FILE
    if path:
        cfg = load_yaml_overrides(cfg, Path(path))
    return cfg


def load_yaml_overrides(cfg: LinkConfig, path: Path) -> LinkConfig:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping of LinkConfig fields, got {type(data).__name__}")
    return cfg.with_overrides(data.get("link", data))
