"""Publish/subscribe channel for storage change notifications.

Every view that renders stored data subscribes to the key it displays.
Writers publish one :class:`StorageChange` per committed write; delivery
is synchronous and in subscription order, including to the view that
made the write.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageChange:
    key: str
    new_value: str | None
    version: int | None = None


Listener = Callable[[StorageChange], None]


@dataclass(eq=False)
class Subscription:
    key: str
    callback: Listener
    active: bool = field(default=True)


class ChangeChannel:
    def __init__(self):
        self._subscriptions: list[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(self, key: str, callback: Listener) -> Subscription:
        subscription = Subscription(key=key, callback=callback)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscription.active = False
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def subscriber_count(self, key: str | None = None) -> int:
        with self._lock:
            return sum(1 for s in self._subscriptions if key is None or s.key == key)

    def publish(self, change: StorageChange) -> int:
        """Deliver ``change`` to the subscribers of its key.

        Returns the number of listeners that handled it. A listener that
        raises is logged and skipped.
        """
        with self._lock:
            targets = [s for s in self._subscriptions if s.key == change.key]

        delivered = 0
        for subscription in targets:
            if not subscription.active:
                continue
            try:
                subscription.callback(change)
            except Exception:
                logger.exception("Change listener failed for key=%s", change.key)
                continue
            delivered += 1
        return delivered
