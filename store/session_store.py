"""
地图会话的存取逻辑（内存）。
每个会话持有一个地图表面和一个等时圈控件。
"""

from __future__ import annotations

import logging
import uuid
from collections import deque
from contextlib import contextmanager
from datetime import datetime
from typing import Deque, Dict, Iterator, List, Optional

from modules.reachability import InMemoryMapSurface, ReachabilityControl, ReachabilityEvent
from modules.reachability.schemas import ReachabilityOptions

logger = logging.getLogger(__name__)

EVENT_LOG_SIZE = 200


class ReachabilitySession:
    """
    One map plus its control. Records every notification the control emits.
    """

    def __init__(self, control: ReachabilityControl, map_surface: Optional[InMemoryMapSurface] = None):
        self.session_id = uuid.uuid4().hex
        self.created_at = datetime.now()
        self.map = map_surface or InMemoryMapSurface()
        self.control = control
        self.event_log: Deque[ReachabilityEvent] = deque(maxlen=EVENT_LOG_SIZE)
        control.events.on_any(self.event_log.append)
        control.on_add(self.map)

    @contextmanager
    def capture(self) -> Iterator[List[ReachabilityEvent]]:
        """Collect the notifications fired inside the block."""
        fired: List[ReachabilityEvent] = []
        self.control.events.on_any(fired.append)
        try:
            yield fired
        finally:
            self.control.events.off_any(fired.append)

    def close(self) -> None:
        self.control.on_remove()


class SessionRepo:
    def __init__(self):
        self._sessions: Dict[str, ReachabilitySession] = {}

    def create(self, options: Optional[ReachabilityOptions] = None, **kwargs) -> ReachabilitySession:
        control = ReachabilityControl(options, **kwargs)
        session = ReachabilitySession(control)
        self._sessions[session.session_id] = session
        logger.info(
            "会话已创建 id=%s mock=%s travel_mode=%s",
            session.session_id, control.client.is_mock, control.modes.active,
        )
        return session

    def get(self, session_id: str) -> Optional[ReachabilitySession]:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info("会话已关闭 id=%s", session_id)
        return True

    def list_ids(self) -> List[str]:
        return list(self._sessions)

    def clear(self) -> None:
        for session_id in list(self._sessions):
            self.remove(session_id)


session_repo = SessionRepo()
