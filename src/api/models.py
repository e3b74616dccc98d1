"""Requests and Response models"""

from typing import Optional

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.models import MAX_PLAYERS, GameModel
from src.core.paths import SEPARATOR

PlayerName = str


def _validate_identifier(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise InvalidRequestError("Identifier cannot be blank.")
    if SEPARATOR in value:
        raise InvalidRequestError(
            f"Identifier {value!r} cannot contain {SEPARATOR!r} (it is used as path separator)."
        )
    return value


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    game_id: Optional[str] = None  # store assigns one when absent
    name: Optional[str] = None
    password: Optional[str] = None

    @field_validator("game_id")
    @classmethod
    def validate_game_id(cls, value: Optional[str]) -> Optional[str]:
        return _validate_identifier(value)

    @field_validator("name", "password")
    @classmethod
    def empty_means_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value


class JoinGameRequest(BaseModel):
    game_id: str
    player_name: PlayerName
    password: Optional[str] = None

    @field_validator("game_id")
    @classmethod
    def validate_game_id(cls, value: str) -> str:
        return _validate_identifier(value)

    @field_validator("player_name")
    @classmethod
    def validate_player_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise InvalidRequestError("Player name cannot be blank.")
        return value


class GetGameRequest(BaseModel):
    game_id: str


class DeleteGameRequest(BaseModel):
    game_id: str


# --- RESPONSE MODELS ---
class GameSummary(BaseModel):
    """What a lobby listing shows about a game. The password itself is never part of it."""

    game_id: str
    name: Optional[str]
    created_at: Optional[float]
    player_count: int
    max_players: int = MAX_PLAYERS
    has_password: bool

    @classmethod
    def from_model(cls, game: GameModel) -> "GameSummary":
        return cls(
            game_id=game.game_id,
            name=game.name,
            created_at=game.created_at,
            player_count=len(game.players),
            has_password=game.has_password,
        )


class JoinGameResponse(BaseModel):
    game_id: str
    player_id: str
