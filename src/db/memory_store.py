"""Implementation of the DocumentStore keeping all documents in a dictionary (single process)."""

import logging
import time
from copy import deepcopy
from threading import RLock
from typing import Optional
from uuid import uuid4

from src.core.exceptions import InvalidPathError
from src.core.models import Document, Outcome
from src.core.paths import PathUpdates, apply_path_updates
from src.core.shared_types import ErrorKind
from src.db.repository import DropCallback, SnapshotCallback
from src.db.subscriptions import StoreSubscription, SubscriberRegistry

logger = logging.getLogger(__name__)


class InMemoryDocumentStore:
    """Data stored in a dict / snapshots fanned out synchronously right after each write."""

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._lock = RLock()
        self.subscribers = SubscriberRegistry()

    def get(self, game_id: str) -> Outcome[Document]:
        with self._lock:
            document = self._documents.get(game_id)
            if document is None:
                return Outcome.failure(ErrorKind.NOT_FOUND, f"Game {game_id!r} not found.")
            return Outcome.success(deepcopy(document))

    def subscribe(
        self,
        game_id: str,
        on_snapshot: SnapshotCallback,
        on_drop: Optional[DropCallback] = None,
    ) -> Outcome[StoreSubscription]:
        subscription = self.subscribers.add(game_id, on_snapshot, on_drop)
        with self._lock:
            current = self._documents.get(game_id)
        subscription.deliver(current)
        return Outcome.success(subscription)

    def apply_path_updates(self, game_id: str, updates: PathUpdates) -> Outcome[None]:
        with self._lock:
            document = self._documents.get(game_id)
            if document is None:
                return Outcome.failure(ErrorKind.NOT_FOUND, f"Game {game_id!r} not found.")
            try:
                updated = apply_path_updates(document, updates)
            except InvalidPathError as exc:
                logger.warning("Rejected update on game %s: %s", game_id, exc)
                return Outcome.failure(ErrorKind.INVALID_REQUEST, str(exc))
            self._documents[game_id] = updated
        self.subscribers.publish(game_id, updated)
        return Outcome.success()

    def create_game(
        self, initial: Document, game_id: Optional[str] = None
    ) -> Outcome[str]:
        new_id = game_id or uuid4().hex
        document = deepcopy(initial)
        document.setdefault("players", {})
        document.setdefault("createdAt", time.time())
        with self._lock:
            if new_id in self._documents:
                return Outcome.failure(
                    ErrorKind.ALREADY_EXISTS, f"Game {new_id!r} already exists."
                )
            self._documents[new_id] = document
        self.subscribers.publish(new_id, document)
        return Outcome.success(new_id)

    def delete_game(self, game_id: str) -> Outcome[None]:
        with self._lock:
            if self._documents.pop(game_id, None) is None:
                return Outcome.failure(ErrorKind.NOT_FOUND, f"Game {game_id!r} not found.")
        self.subscribers.publish(game_id, None)
        return Outcome.success()

    def list_games(self) -> Outcome[list[tuple[str, Document]]]:
        with self._lock:
            return Outcome.success(
                [(game_id, deepcopy(doc)) for game_id, doc in self._documents.items()]
            )
