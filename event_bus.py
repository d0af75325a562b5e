"""Simple in-process event bus.

The trade engine publishes ``trade.executed`` after a trade commits.
Subscribers run synchronously on the publishing thread; a failing subscriber is
logged and never affects the publisher or the other subscribers.
"""
from collections import defaultdict
from typing import Callable, Dict, List
import logging
import threading

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_subscribers: Dict[str, List[Callable[[dict], None]]] = defaultdict(list)

def subscribe(event_type: str, callback: Callable[[dict], None]):
    """Register ``callback`` for ``event_type`` ("*" receives everything)."""
    with _lock:
        _subscribers[event_type].append(callback)

def unsubscribe(event_type: str, callback: Callable[[dict], None]):
    with _lock:
        subs = _subscribers.get(event_type, [])
        if callback in subs:
            subs.remove(callback)

def publish(event_type: str, payload: dict):
    # Copy to avoid mutation while iterating
    with _lock:
        subs = list(_subscribers.get(event_type, []))
        subs_all = list(_subscribers.get("*", []))
    for cb in subs + subs_all:
        try:
            cb({"type": event_type, **payload})
        except Exception:
            logger.exception("Subscriber %r failed handling %s", cb, event_type)
