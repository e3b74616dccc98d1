"""Subscriber bookkeeping + snapshot fan-out, shared by the store implementations."""

import logging
from copy import deepcopy
from threading import RLock
from typing import Optional

from src.core.models import Document
from src.db.repository import DropCallback, SnapshotCallback

logger = logging.getLogger(__name__)


class StoreSubscription:
    def __init__(
        self,
        registry: "SubscriberRegistry",
        game_id: str,
        on_snapshot: SnapshotCallback,
        on_drop: Optional[DropCallback],
    ) -> None:
        self.game_id = game_id
        self.on_snapshot = on_snapshot
        self.on_drop = on_drop
        self._registry = registry
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._registry.remove(self)

    def mark_dropped(self) -> None:
        self._active = False

    def deliver(self, document: Optional[Document]) -> None:
        if self._active:
            # every subscriber gets its own copy, nobody can mutate what the store (or another client) holds
            self.on_snapshot(deepcopy(document))


class SubscriberRegistry:
    def __init__(self) -> None:
        self._subscriptions: dict[str, list[StoreSubscription]] = {}
        self._lock = RLock()

    def add(
        self,
        game_id: str,
        on_snapshot: SnapshotCallback,
        on_drop: Optional[DropCallback] = None,
    ) -> StoreSubscription:
        subscription = StoreSubscription(self, game_id, on_snapshot, on_drop)
        with self._lock:
            self._subscriptions.setdefault(game_id, []).append(subscription)
        logger.info("Subscribed to game %s", game_id)
        return subscription

    def remove(self, subscription: StoreSubscription) -> None:
        with self._lock:
            subscribers = self._subscriptions.get(subscription.game_id, [])
            if subscription in subscribers:
                subscribers.remove(subscription)
            # Clean up if there are no more subscribers for this game
            if not subscribers:
                self._subscriptions.pop(subscription.game_id, None)
        logger.info("Unsubscribed from game %s", subscription.game_id)

    def count(self, game_id: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(game_id, []))

    def publish(self, game_id: str, document: Optional[Document]) -> None:
        with self._lock:
            subscribers = list(self._subscriptions.get(game_id, []))
        for subscription in subscribers:
            try:
                subscription.deliver(document)
            except Exception:
                # one broken subscriber must not stop the others or fail the write that triggered it
                logger.exception("Subscriber of game %s failed on snapshot", game_id)

    def drop_all(self, game_id: Optional[str] = None) -> None:
        """End subscriptions from the store side (connection lost, shutdown). Subscribers are told via on_drop."""
        with self._lock:
            if game_id is None:
                dropped = [s for subs in self._subscriptions.values() for s in subs]
                self._subscriptions.clear()
            else:
                dropped = self._subscriptions.pop(game_id, [])
        for subscription in dropped:
            subscription.mark_dropped()
            logger.info("Subscription to game %s dropped", subscription.game_id)
            if subscription.on_drop is not None:
                subscription.on_drop()
