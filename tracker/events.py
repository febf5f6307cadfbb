from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = ['TRANSACTIONS_CHANGED', 'CATEGORIES_CHANGED', 'Event', 'EventBus']

TRANSACTIONS_CHANGED = "TRANSACTIONS_CHANGED"
CATEGORIES_CHANGED = "CATEGORIES_CHANGED"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    """Synchronous publish/subscribe used to recompute derived view state.

    Handlers run in subscription order.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event, dict], None]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], None]) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> None:
        if name not in self._subscribers:
            return

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        for handler in list(self._subscribers[name]):
            handler(event, payload)
