"""
Message Channel.

An explicit publish/subscribe object passed to the core instead of a global
event bus. Delivery is synchronous and in subscription order, so a publish
returns only after every listener has run.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Any]
WildcardHandler = Callable[[str, Dict[str, Any]], Any]


class MessageChannel:
    """
    Fire-and-forget, many-listener event channel.

    A listener that raises is logged and skipped; the remaining listeners
    still receive the event.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._wildcards: List[WildcardHandler] = []

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        """Register handler for event. Returns a function that unsubscribes it."""
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers.get(event, []):
                self._handlers[event].remove(handler)

        return unsubscribe

    def subscribe_all(self, handler: WildcardHandler) -> Callable[[], None]:
        """Register handler(event, payload) for every event."""
        self._wildcards.append(handler)

        def unsubscribe() -> None:
            if handler in self._wildcards:
                self._wildcards.remove(handler)

        return unsubscribe

    def publish(self, event: str, payload: Optional[Mapping[str, Any]] = None) -> int:
        """Deliver payload to every listener of event. Returns the listener count."""
        detail = dict(payload or {})
        delivered = 0
        for handler in list(self._handlers.get(event, [])):
            self._deliver(event, lambda: handler(detail))
            delivered += 1
        for handler in list(self._wildcards):
            self._deliver(event, lambda: handler(event, detail))
            delivered += 1
        return delivered

    def _deliver(self, event: str, call: Callable[[], Any]) -> None:
        try:
            call()
        except Exception:
            logger.exception(f"Listener for '{event}' failed")

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))
