"""Lifecycle event names and a synchronous, vetoable listener bus."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

_LOGGER = logging.getLogger("SpatialNav.Core")

EVENT_PREFIX = "sn:"


class NavEvent(str, Enum):
    WILL_UNFOCUS = "willunfocus"
    UNFOCUSED = "unfocused"
    WILL_FOCUS = "willfocus"
    FOCUSED = "focused"
    NAVIGATE_FAILED = "navigatefailed"
    ENTER_DOWN = "enter-down"
    ENTER_UP = "enter-up"
    WILL_MOVE = "willmove"

    @property
    def qualified(self) -> str:
        return EVENT_PREFIX + self.value


@dataclass
class LifecycleEvent:
    """What a listener receives. ``cancel()`` vetoes a cancelable event."""

    name: str
    target: Any
    detail: Mapping[str, Any]
    cancelable: bool
    cancelled: bool = False

    def cancel(self) -> None:
        if self.cancelable:
            self.cancelled = True


Listener = Callable[[LifecycleEvent], Optional[bool]]


@dataclass(eq=False)
class _Subscription:
    listener: Listener
    element: Any = None


class EventBus:
    """Dispatches navigation events to listeners.

    A listener subscribes for one element or, with ``element=None``, for every
    element. It vetoes a cancelable event by calling ``event.cancel()`` or by
    returning ``False``.
    """

    def __init__(self, *, record_history: bool = False) -> None:
        self._subscriptions: Dict[str, List[_Subscription]] = {}
        self.history: List[LifecycleEvent] = []
        self.record_history = record_history

    def subscribe(self, event: str, listener: Listener, *, element: Any = None) -> Callable[[], None]:
        name = _qualify(event)
        subscription = _Subscription(listener=listener, element=element)
        self._subscriptions.setdefault(name, []).append(subscription)

        def _unsubscribe() -> None:
            entries = self._subscriptions.get(name, [])
            if subscription in entries:
                entries.remove(subscription)

        return _unsubscribe

    def clear(self) -> None:
        self._subscriptions.clear()
        self.history.clear()

    def dispatch(self, element: Any, event: str, detail: Mapping[str, Any], cancelable: bool) -> bool:
        name = _qualify(event)
        payload = LifecycleEvent(name=name, target=element, detail=dict(detail), cancelable=cancelable)
        if self.record_history:
            self.history.append(payload)
        for subscription in list(self._subscriptions.get(name, [])):
            if subscription.element is not None and subscription.element is not element:
                continue
            result = subscription.listener(payload)
            if result is False:
                payload.cancel()
        if payload.cancelled:
            _LOGGER.debug("Event %s vetoed for %r", name, element)
        return not payload.cancelled

    def names(self) -> List[str]:
        """Names of recorded events in dispatch order (requires ``record_history``)."""
        return [entry.name for entry in self.history]


def _qualify(event: str) -> str:
    if isinstance(event, NavEvent):
        return event.qualified
    return event if event.startswith(EVENT_PREFIX) else EVENT_PREFIX + event
