"""
Notifications emitted by the reachability control.

Hosts subscribe by name; every name carries the ``reachability:`` prefix.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, DefaultDict, Dict, List

logger = logging.getLogger(__name__)

EVENT_PREFIX = "reachability:"

CONTROL_ADDED = EVENT_PREFIX + "control_added"
CONTROL_REMOVED = EVENT_PREFIX + "control_removed"
CONTROL_EXPANDED = EVENT_PREFIX + "control_expanded"
CONTROL_COLLAPSED = EVENT_PREFIX + "control_collapsed"
DRAW_ACTIVATED = EVENT_PREFIX + "draw_activated"
DRAW_DEACTIVATED = EVENT_PREFIX + "draw_deactivated"
DELETE_ACTIVATED = EVENT_PREFIX + "delete_activated"
DELETE_DEACTIVATED = EVENT_PREFIX + "delete_deactivated"
REQUEST_START = EVENT_PREFIX + "api_call_start"
REQUEST_END = EVENT_PREFIX + "api_call_end"
DISPLAYED = EVENT_PREFIX + "displayed"
DELETE = EVENT_PREFIX + "delete"
CLEARED = EVENT_PREFIX + "cleared"
ERROR = EVENT_PREFIX + "error"
NO_DATA = EVENT_PREFIX + "no_data"
EXPORTED = EVENT_PREFIX + "exported"


def event_name(short_name: str) -> str:
    return short_name if short_name.startswith(EVENT_PREFIX) else EVENT_PREFIX + short_name


@dataclass
class ReachabilityEvent:
    name: str
    payload: Dict[str, Any] = field(default_factory=dict)
    fired_at: datetime = field(default_factory=datetime.now)


Listener = Callable[[ReachabilityEvent], Any]


class EventBus:
    """Synchronous publish/subscribe channel, listeners run in subscription order."""

    def __init__(self):
        self._listeners: DefaultDict[str, List[Listener]] = defaultdict(list)
        self._any: List[Listener] = []

    def on(self, name: str, listener: Listener) -> None:
        self._listeners[event_name(name)].append(listener)

    def off(self, name: str, listener: Listener) -> None:
        listeners = self._listeners.get(event_name(name), [])
        if listener in listeners:
            listeners.remove(listener)

    def on_any(self, listener: Listener) -> None:
        self._any.append(listener)

    def off_any(self, listener: Listener) -> None:
        if listener in self._any:
            self._any.remove(listener)

    def fire(self, name: str, **payload: Any) -> ReachabilityEvent:
        event = ReachabilityEvent(event_name(name), payload)
        logger.debug("fire %s", event.name)
        for listener in list(self._listeners.get(event.name, [])) + list(self._any):
            listener(event)
        return event
