"""
Simple "edit-the-variables" script:
- Fetches the action list from the device
- Prints every action
- Triggers ACTION_ID when it is set (env ACTION_ID)
- Optionally sends one navigation gesture, rescaled to the device map
"""

from __future__ import annotations

from teleop_link import config
from teleop_link.collaborators import ActionClient, CanvasGesture, NavigationClient
from teleop_link.utils import setup_logging

# ----------------------------
# Config you edit
# ----------------------------
ACTION_ID = config.env_str("ACTION_ID", "")
SEND_GESTURE = config.env_bool("SEND_GESTURE", False)

# (width, height, down_x, down_y, up_x, up_y) on a 400x300 surface
GESTURE = CanvasGesture(400, 300, 200, 150, 260, 90)


def run() -> None:
    setup_logging(config.LOG_LEVEL)
    actions = ActionClient(config.HTTP_BASE_URL, timeout_s=config.HTTP_TIMEOUT_S)

    for action in actions.fetch_actions():
        print(f"{action.id!s:>6}  {action.description}")

    if ACTION_ID:
        actions.trigger(int(ACTION_ID) if ACTION_ID.isdigit() else ACTION_ID)
        print(f"triggered {ACTION_ID}")

    if SEND_GESTURE:
        nav = NavigationClient(config.HTTP_BASE_URL, map_size_path=config.MAP_SIZE_PATH, timeout_s=config.HTTP_TIMEOUT_S)
        sent = nav.send_gesture(GESTURE, nav.fetch_map_size())
        print("gesture sent:", sent.to_payload())


if __name__ == "__main__":
    run()
