# hn_core/common/events.py
import logging
from collections import defaultdict
from typing import Callable, Dict, List, Any

Handler = Callable[[Dict[str, Any]], None]

logger = logging.getLogger(__name__)

_registry: Dict[str, List[Handler]] = defaultdict(list)


def subscribe(event_name: str):
    """
    Decorator to register an event handler.
    Usage:
        @subscribe("contract.workflow_advanced")
        def handler(payload): ...
    """
    def _decorator(fn: Handler) -> Handler:
        if fn not in _registry[event_name]:
            _registry[event_name].append(fn)
        return fn
    return _decorator


def unsubscribe(event_name: str, fn: Handler) -> None:
    handlers = _registry.get(event_name, [])
    if fn in handlers:
        handlers.remove(fn)


def publish(event_name: str, payload: Dict[str, Any]) -> int:
    """
    Publish an event to in-process subscribers.
    Keep payloads ID-based to avoid cross-app imports.

    Publishing happens after the write it describes has committed, so a failing
    subscriber is logged and skipped; it never undoes the committed change.
    Returns the number of handlers that completed.
    """
    delivered = 0
    for handler in list(_registry.get(event_name, [])):
        try:
            handler(payload)
        except Exception:
            logger.exception(
                "event_handler_failed",
                extra={"event_name": event_name, "handler": getattr(handler, "__name__", repr(handler))},
            )
            continue
        delivered += 1
    return delivered
