"""Protocol for the shared document store (in-memory and SQL Alchemy implementations live next to this file)."""

from typing import Callable, Optional, Protocol

from src.core.models import Document, Outcome
from src.core.paths import PathUpdates

SnapshotCallback = Callable[[Optional[Document]], None]
DropCallback = Callable[[], None]


class Subscription(Protocol):
    """Handle returned by DocumentStore.subscribe."""

    @property
    def active(self) -> bool: ...

    def unsubscribe(self) -> None: ...


class DocumentStore(Protocol):
    """
    Persistence + realtime fan-out of game documents.

    NOTE: every method reports failure through the returned Outcome. Nothing raises across this boundary.
    """

    def get(self, game_id: str) -> Outcome[Document]:
        """Current document of a game (NOT_FOUND if it does not exist)."""
        ...

    def subscribe(
        self,
        game_id: str,
        on_snapshot: SnapshotCallback,
        on_drop: Optional[DropCallback] = None,
    ) -> Outcome[Subscription]:
        """
        Deliver the full current document right away and again after every change.
        None is delivered when the game does not exist (anymore).
        on_drop is called if the store ends the subscription on its side.
        """
        ...

    def apply_path_updates(self, game_id: str, updates: PathUpdates) -> Outcome[None]:
        """Apply all leaf writes as ONE atomic operation."""
        ...

    def create_game(
        self, initial: Document, game_id: Optional[str] = None
    ) -> Outcome[str]:
        """Store a new game and return its ID (store-assigned unless one is given)."""
        ...

    def delete_game(self, game_id: str) -> Outcome[None]:
        """Remove a game's record."""
        ...

    def list_games(self) -> Outcome[list[tuple[str, Document]]]:
        """All games as (ID, document) pairs."""
        ...
