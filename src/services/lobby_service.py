"""Orchestration of lobby requests (create / join / list / delete) against the document store."""

import logging
import time
from uuid import uuid4

from src.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    GameSummary,
    GetGameRequest,
    JoinGameRequest,
    JoinGameResponse,
)
from src.board.intents import AddPlayer
from src.board.paths import build_updates
from src.core.exceptions import CounterBoardError, PasswordMismatchError
from src.core.models import GameModel, Outcome
from src.core.shared_types import ErrorKind
from src.db.repository import DocumentStore

logger = logging.getLogger(__name__)


class LobbyService:
    """Thin layer over the store. Every method answers with an Outcome; failures carry a message to show as-is."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def create_game(self, request: CreateGameRequest) -> Outcome[str]:
        """Create an empty game (no players). Returns the game ID."""
        initial = {
            "name": request.name,
            "password": request.password,
            "createdAt": time.time(),
            "players": {},
        }
        outcome = self.store.create_game(initial, game_id=request.game_id)
        if outcome.ok:
            logger.info("Created game %s", outcome.value)
        else:
            logger.warning("Could not create game: %s %s", outcome.error, outcome.message)
        return outcome

    def join_game(self, request: JoinGameRequest) -> Outcome[JoinGameResponse]:
        """Add a new player to an existing game."""
        fetched = self.get_game(GetGameRequest(game_id=request.game_id))
        if not fetched.ok or fetched.value is None:
            return Outcome.failure(fetched.error or ErrorKind.NOT_FOUND, fetched.message)
        game = fetched.value

        player_id = uuid4().hex
        try:
            check_password(game, request.password)
            updates = build_updates(
                game, AddPlayer(name=request.player_name, player_id=player_id)
            )
        except CounterBoardError as exc:
            logger.warning("Join of game %s rejected: %s", request.game_id, exc)
            return Outcome.failure(exc.kind, str(exc))

        written = self.store.apply_path_updates(request.game_id, updates)
        if not written.ok:
            return Outcome.failure(written.error or ErrorKind.STORE_UNAVAILABLE, written.message)

        logger.info("Player %s joined game %s", player_id, request.game_id)
        return Outcome.success(
            JoinGameResponse(game_id=request.game_id, player_id=player_id)
        )

    def get_game(self, request: GetGameRequest) -> Outcome[GameModel]:
        outcome = self.store.get(request.game_id)
        if not outcome.ok:
            return Outcome.failure(outcome.error or ErrorKind.STORE_UNAVAILABLE, outcome.message)
        return Outcome.success(GameModel.from_document(request.game_id, outcome.value))

    def list_games(self) -> Outcome[list[GameSummary]]:
        """All games, oldest first."""
        outcome = self.store.list_games()
        if not outcome.ok:
            return Outcome.failure(outcome.error or ErrorKind.STORE_UNAVAILABLE, outcome.message)
        summaries = [
            GameSummary.from_model(GameModel.from_document(game_id, document))
            for game_id, document in outcome.value or []
        ]
        summaries.sort(key=lambda summary: (summary.created_at or 0.0, summary.game_id))
        return Outcome.success(summaries)

    def delete_game(self, request: DeleteGameRequest) -> Outcome[None]:
        """Handle a request to delete a Game record."""
        outcome = self.store.delete_game(request.game_id)
        if outcome.ok:
            logger.info("Deleted game %s", request.game_id)
        return outcome


def check_password(game: GameModel, password: str | None) -> None:
    """
    Plain equality against the stored secret.
    NOTE: the secret is stored unencrypted and only checked client side. Anyone writing to the store directly
    bypasses it.
    """
    if game.has_password and password != game.password:
        raise PasswordMismatchError("Password does not match.")
