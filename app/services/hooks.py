"""Subscribers notified after a parent webhook has been applied to its order."""
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

WebhookSubscriber = Callable[[str, dict[str, Any]], None]


class WebhookHooks:
    def __init__(self):
        self._subscribers: list[WebhookSubscriber] = []

    def subscribe(self, fn: WebhookSubscriber) -> WebhookSubscriber:
        """Usable as a decorator."""
        self._subscribers.append(fn)
        return fn

    def unsubscribe(self, fn: WebhookSubscriber) -> None:
        if fn in self._subscribers:
            self._subscribers.remove(fn)

    def emit(self, order_id: str, payload: dict[str, Any]) -> None:
        for fn in list(self._subscribers):
            logger.debug("mobbex_webhook_process -> %s", getattr(fn, "__name__", fn))
            fn(order_id, payload)


webhook_hooks = WebhookHooks()
