"""
In-memory registry of viewer instances, least recently used first out.
"""

import logging
import threading
from collections import OrderedDict
from typing import Callable, Optional

from splitview.viewer import Viewer

logger = logging.getLogger(__name__)


class ViewerRegistry:
    """
    Keeps at most ``max_viewers`` viewers; evicted viewers are closed so their
    object URLs are released.
    """

    def __init__(self, factory: Callable[[], Viewer], max_viewers: int = 64):
        self.factory = factory
        self.max_viewers = max(1, max_viewers)
        self._viewers: "OrderedDict[str, Viewer]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, viewer_id: Optional[str]) -> Optional[Viewer]:
        if not viewer_id:
            return None
        with self._lock:
            viewer = self._viewers.get(viewer_id)
            if viewer is not None:
                self._viewers.move_to_end(viewer_id)
            return viewer

    def get_or_create(self, viewer_id: Optional[str]) -> Viewer:
        viewer = self.get(viewer_id)
        if viewer is not None:
            return viewer

        viewer = self.factory()
        evicted = []
        with self._lock:
            self._viewers[viewer.viewer_id] = viewer
            while len(self._viewers) > self.max_viewers:
                _, old = self._viewers.popitem(last=False)
                evicted.append(old)
        for old in evicted:
            logger.info(f"Evicting viewer {old.viewer_id}")
            old.close()
        return viewer

    def remove(self, viewer_id: str) -> bool:
        with self._lock:
            viewer = self._viewers.pop(viewer_id, None)
        if viewer is None:
            return False
        viewer.close()
        return True

    def close_all(self) -> None:
        with self._lock:
            viewers = list(self._viewers.values())
            self._viewers.clear()
        for viewer in viewers:
            viewer.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._viewers)
