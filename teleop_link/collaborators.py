"""
One-shot HTTP helpers around the control link.

These are not part of the streaming path: each call is a single request made
when the operator presses an action button or finishes a navigation gesture.
Errors surface as requests exceptions; callers decide whether to retry.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Union

import requests

logger = logging.getLogger(__name__)

ActionId = Union[int, str]


@dataclass(frozen=True)
class Action:
    id: ActionId
    description: str


@dataclass(frozen=True)
class MapSize:
    width: float
    height: float


@dataclass(frozen=True)
class CanvasGesture:
    """
    A drag on the navigation surface: where it went down and where it came up,
    in the surface's own pixel frame (width x height).
    """
    width: float
    height: float
    down_x: float
    down_y: float
    up_x: float
    up_y: float

    def scaled_to(self, size: MapSize) -> "CanvasGesture":
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"gesture surface has no area: {self.width}x{self.height}")
        sx = size.width / self.width
        sy = size.height / self.height
        return CanvasGesture(
            width=size.width,
            height=size.height,
            down_x=self.down_x * sx,
            down_y=self.down_y * sy,
            up_x=self.up_x * sx,
            up_y=self.up_y * sy,
        )

    def to_payload(self) -> Dict[str, float]:
        return asdict(self)


class _HttpClient:
    def __init__(self, base_url: str, *, timeout_s: float = 2.0, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    def _get_json(self, path: str) -> Any:
        resp = self.session.get(self.base_url + path, timeout=self.timeout_s)
        resp.raise_for_status()
        return resp.json()

    def _post_json(self, path: str, body: Dict[str, Any]) -> None:
        resp = self.session.post(self.base_url + path, json=body, timeout=self.timeout_s)
        resp.raise_for_status()


class ActionClient(_HttpClient):
    def fetch_actions(self) -> List[Action]:
        data = self._get_json("/actions")
        actions = [Action(id=a["id"], description=str(a["description"])) for a in data.get("actions", [])]
        logger.info("fetched %d actions", len(actions))
        return actions

    def trigger(self, action_id: ActionId) -> None:
        logger.info("trigger action %s", action_id)
        self._post_json("/action/", {"id": action_id})


class NavigationClient(_HttpClient):
    def __init__(self, base_url: str, *, map_size_path: str = "/map_size", **kwargs: Any) -> None:
        super().__init__(base_url, **kwargs)
        self.map_size_path = map_size_path

    def fetch_map_size(self) -> MapSize:
        data = self._get_json(self.map_size_path)
        return MapSize(width=float(data["width"]), height=float(data["height"]))

    def send_gesture(self, gesture: CanvasGesture, map_size: Optional[MapSize] = None) -> CanvasGesture:
        if map_size is not None:
            gesture = gesture.scaled_to(map_size)
        self._post_json("/canvas_touch/", gesture.to_payload())
        return gesture
