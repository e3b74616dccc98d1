"""Implementation of the DocumentStore using SQLAlchemy"""

import logging
import time
from copy import deepcopy
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import InvalidPathError
from src.core.models import Document, Outcome
from src.core.paths import PathUpdates, apply_path_updates
from src.core.shared_types import ErrorKind
from src.db.repository import DropCallback, SnapshotCallback
from src.db.schema import DBGame
from src.db.subscriptions import StoreSubscription, SubscriberRegistry

logger = logging.getLogger(__name__)

# Top-level document fields and the column each one lives in.
DOCUMENT_COLUMNS: dict[str, str] = {
    "name": "name",
    "password": "password",
    "createdAt": "created_at",
    "players": "players",
}


class SQLDocumentStore:
    """
    Data stored using SQL / methods implemented using SQLAlchemy.

    Realtime fan-out is in-process: subscribers registered on this store are notified after each committed write.
    """

    def __init__(self, db_session: Session) -> None:
        self.db = db_session
        self.subscribers = SubscriberRegistry()

    def get(self, game_id: str) -> Outcome[Document]:
        try:
            game_db = self._fetch_game(game_id)
        except SQLAlchemyError as exc:
            return self._unavailable("get", game_id, exc)
        if game_db is None:
            return _not_found(game_id)
        return Outcome.success(self._to_document(game_db))

    def subscribe(
        self,
        game_id: str,
        on_snapshot: SnapshotCallback,
        on_drop: Optional[DropCallback] = None,
    ) -> Outcome[StoreSubscription]:
        try:
            game_db = self._fetch_game(game_id)
        except SQLAlchemyError as exc:
            return self._unavailable("subscribe", game_id, exc)
        subscription = self.subscribers.add(game_id, on_snapshot, on_drop)
        subscription.deliver(self._to_document(game_db) if game_db else None)
        return Outcome.success(subscription)

    def apply_path_updates(self, game_id: str, updates: PathUpdates) -> Outcome[None]:
        """Read-modify-write of one row, under a row lock, committed as one transaction."""
        try:
            game_db = self._fetch_game(game_id, for_update=True)
            if game_db is None:
                self.db.rollback()
                return _not_found(game_id)
            updated = apply_path_updates(self._to_document(game_db), updates)
            self._write_document(game_db, updated)
            self.db.commit()
            self.db.refresh(game_db)
            document = self._to_document(game_db)
        except InvalidPathError as exc:
            self.db.rollback()
            logger.warning("Rejected update on game %s: %s", game_id, exc)
            return Outcome.failure(ErrorKind.INVALID_REQUEST, str(exc))
        except SQLAlchemyError as exc:
            self.db.rollback()
            return self._unavailable("update", game_id, exc)

        self.subscribers.publish(game_id, document)
        return Outcome.success()

    def create_game(
        self, initial: Document, game_id: Optional[str] = None
    ) -> Outcome[str]:
        """Store new game and return the newly created game ID."""
        new_id = game_id or uuid4().hex
        try:
            if self._fetch_game(new_id) is not None:
                return Outcome.failure(
                    ErrorKind.ALREADY_EXISTS, f"Game {new_id!r} already exists."
                )
            game_db = DBGame(
                id=new_id,
                name=initial.get("name"),
                password=initial.get("password"),
                players=dict(initial.get("players") or {}),
                created_at=initial.get("createdAt") or time.time(),
            )
            self.db.add(game_db)
            self.db.commit()
            self.db.refresh(game_db)
            document = self._to_document(game_db)
        except SQLAlchemyError as exc:
            self.db.rollback()
            return self._unavailable("create", new_id, exc)

        self.subscribers.publish(new_id, document)
        return Outcome.success(new_id)

    def delete_game(self, game_id: str) -> Outcome[None]:
        """Remove a game's record."""
        try:
            game_db = self._fetch_game(game_id)
            if game_db is None:
                return _not_found(game_id)
            self.db.delete(game_db)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            return self._unavailable("delete", game_id, exc)

        self.subscribers.publish(game_id, None)
        return Outcome.success()

    def list_games(self) -> Outcome[list[tuple[str, Document]]]:
        try:
            games = self.db.scalars(select(DBGame).order_by(DBGame.created_at)).all()
        except SQLAlchemyError as exc:
            return self._unavailable("list", "*", exc)
        return Outcome.success([(game.id, self._to_document(game)) for game in games])

    def _fetch_game(self, game_id: str, for_update: bool = False) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        if for_update:
            query = query.with_for_update()
        return self.db.scalar(query)

    def _to_document(self, game_db: DBGame) -> Document:
        """Convert SQLAlchemy model to the document shape shared with every other store."""
        return {
            field: deepcopy(getattr(game_db, column))
            for field, column in DOCUMENT_COLUMNS.items()
        }

    def _write_document(self, game_db: DBGame, document: dict[str, Any]) -> None:
        unknown = set(document) - set(DOCUMENT_COLUMNS)
        if unknown:
            raise InvalidPathError(
                f"Unknown top-level field(s): {', '.join(sorted(unknown))}."
            )
        for field, column in DOCUMENT_COLUMNS.items():
            # assign a fresh object: in-place mutation of a JSON column is not tracked
            setattr(game_db, column, document.get(field))

    def _unavailable(
        self, operation: str, game_id: str, exc: SQLAlchemyError
    ) -> Outcome[Any]:
        logger.error("Store %s failed for game %s", operation, game_id, exc_info=exc)
        return Outcome.failure(ErrorKind.STORE_UNAVAILABLE, str(exc))


def _not_found(game_id: str) -> Outcome[Any]:
    return Outcome.failure(ErrorKind.NOT_FOUND, f"Game {game_id!r} not found.")
