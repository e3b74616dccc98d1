"""
Keeps a local mirror of one shared game and forwards intents to the store.

Rules it sticks to:
* The mirror has exactly one writer: the subscription callback. Every inbound snapshot replaces it wholesale.
* submit() never touches the mirror. A successful write shows up when the store echoes it back through the feed,
  a failed one leaves the board at its last confirmed state.
* A controller without a live feed (dropped or unsubscribed) refuses writes until it subscribes again.
* Nothing is queued or retried. Failures come back as Outcome values for the caller to show.
* Two intents touching the same leaf from different clients race at the store (last write wins). Not detected.
"""

import logging
from contextlib import contextmanager
from copy import deepcopy
from typing import Callable, Iterator, Optional

from src.board.intents import Intent
from src.board.paths import build_updates
from src.board.view import TileView, build_board
from src.core.exceptions import CounterBoardError
from src.core.models import Document, GameModel, Outcome
from src.core.paths import PathUpdates
from src.core.shared_types import ErrorKind
from src.db.repository import DocumentStore, Subscription

logger = logging.getLogger(__name__)

Listener = Callable[[GameModel], None]


class OptimisticSyncController:
    """Local, read-only-to-the-outside mirror of a game + the single entry point for mutating it."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self._game_id: Optional[str] = None
        self._game: Optional[GameModel] = None
        self._subscription: Optional[Subscription] = None
        self._connected = False
        self._listeners: list[Listener] = []
        self._pending: dict[str, int] = {}

    # --- SUBSCRIPTION ---
    def subscribe(self, game_id: str) -> Outcome[None]:
        """Start following a game. Any previous subscription (same or other game) is released first."""
        self.unsubscribe()
        self._game_id = game_id
        self._game = GameModel.empty(game_id)

        outcome = self.store.subscribe(game_id, self._on_snapshot, self._on_drop)
        if not outcome.ok:
            logger.warning(
                "Could not subscribe to game %s: %s %s",
                game_id,
                outcome.error,
                outcome.message,
            )
            return Outcome.failure(outcome.error or ErrorKind.STORE_UNAVAILABLE, outcome.message)

        self._subscription = outcome.value
        self._connected = True
        logger.info("Following game %s", game_id)
        return Outcome.success()

    def resubscribe(self) -> Outcome[None]:
        if self._game_id is None:
            return Outcome.failure(ErrorKind.NOT_FOUND, "No game to resubscribe to.")
        return self.subscribe(self._game_id)

    def unsubscribe(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            logger.info("Stopped following game %s", self._game_id)
        self._subscription = None
        self._connected = False

    @contextmanager
    def observe(self, game_id: str) -> Iterator[Outcome[None]]:
        """
        `with controller.observe(game_id) as subscribed:` follows the game for the duration of the block.
        `subscribed` is the Outcome of the subscribe call; on failure the block runs against an empty game.
        """
        outcome = self.subscribe(game_id)
        try:
            yield outcome
        finally:
            self.unsubscribe()

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def game_id(self) -> Optional[str]:
        return self._game_id

    # --- READ SIDE ---
    @property
    def snapshot(self) -> GameModel:
        """Copy of the last confirmed state. Mutating it changes nothing."""
        if self._game is None:
            return GameModel.empty(self._game_id or "")
        return deepcopy(self._game)

    def board(self) -> list[TileView]:
        return build_board(self.snapshot)

    @property
    def pending(self) -> frozenset[str]:
        """Paths with a write in flight. For a "pending" overlay only, never merged into the snapshot."""
        return frozenset(self._pending)

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` after every applied snapshot. Returns a function that removes it again."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    # --- WRITE SIDE ---
    def submit(self, intent: Intent) -> Outcome[PathUpdates]:
        """
        Build the path updates for an intent and send them to the store as one atomic write.
        On success the Outcome carries the updates that were sent.
        """
        if self._game_id is None or self._game is None:
            return Outcome.failure(ErrorKind.NOT_FOUND, "Not following any game.")
        if not self._connected:
            return Outcome.failure(
                ErrorKind.STORE_UNAVAILABLE, "Subscription dropped; resubscribe first."
            )

        try:
            updates = build_updates(self._game, intent)
        except CounterBoardError as exc:
            # rejected locally, the store never hears about it
            logger.warning("Rejected %r: %s", intent, exc)
            return Outcome.failure(exc.kind, str(exc))

        if not updates:
            return Outcome.success(updates)

        self._mark_pending(updates, +1)
        try:
            outcome = self.store.apply_path_updates(self._game_id, updates)
        finally:
            self._mark_pending(updates, -1)

        if not outcome.ok:
            logger.warning(
                "Write for %r failed: %s %s", intent, outcome.error, outcome.message
            )
            return Outcome.failure(outcome.error or ErrorKind.STORE_UNAVAILABLE, outcome.message)
        return Outcome.success(updates)

    # -- Internal helpers --
    def _on_snapshot(self, document: Optional[Document]) -> None:
        game_id = self._game_id or ""
        self._game = GameModel.from_document(game_id, document)
        for listener in list(self._listeners):
            try:
                listener(self.snapshot)
            except Exception:
                logger.exception("Listener failed on snapshot of game %s", game_id)

    def _on_drop(self) -> None:
        logger.warning("Subscription to game %s dropped", self._game_id)
        self._subscription = None
        self._connected = False

    def _mark_pending(self, updates: PathUpdates, change: int) -> None:
        for path in updates:
            count = self._pending.get(path, 0) + change
            if count > 0:
                self._pending[path] = count
            else:
                self._pending.pop(path, None)
