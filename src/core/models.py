"""
Boundary layer data model(s).

These objects are what the store, the sync controller and the UI-facing helpers pass to each other.
The shared store itself only knows about plain nested dictionaries ("documents"), hence the
from_document / to_document pair on each model.
(Decouples the document shape the store persists from the typed view the rest of the application works with)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from src.core.shared_types import ErrorKind

# Type aliases to make the models easier to read
PlayerId = str
EffectName = str
EffectValue = int | bool
Document = dict[str, Any]

STARTING_LIFE = 40
MAX_PLAYERS = 8


@dataclass
class PlayerModel:
    """One participant's counters within a game."""

    name: str = ""
    life: int = STARTING_LIFE
    color: Optional[str] = None
    effects: dict[EffectName, EffectValue] = field(default_factory=dict)
    commander_damage: dict[PlayerId, int] = field(default_factory=dict)
    joined_at: int = 0

    @classmethod
    def from_document(cls, document: Any) -> Optional[PlayerModel]:
        """Lenient: anything that is not a mapping is not a player. Missing fields fall back to their defaults."""
        if not isinstance(document, dict):
            return None
        effects = document.get("effects")
        commander_damage = document.get("commanderDamage")
        return cls(
            name=str(document.get("name") or ""),
            life=_as_int(document.get("life"), STARTING_LIFE),
            color=document.get("color"),
            effects=dict(effects) if isinstance(effects, dict) else {},
            commander_damage=(
                {
                    source: _as_int(damage, 0)
                    for source, damage in commander_damage.items()
                }
                if isinstance(commander_damage, dict)
                else {}
            ),
            joined_at=_as_int(document.get("joinedAt"), 0),
        )

    def to_document(self) -> Document:
        return {
            "name": self.name,
            "life": self.life,
            "color": self.color,
            "effects": dict(self.effects),
            "commanderDamage": dict(self.commander_damage),
            "joinedAt": self.joined_at,
        }


@dataclass
class GameModel:
    """The shared root document of one play session."""

    game_id: str
    name: Optional[str] = None
    password: Optional[str] = None
    created_at: Optional[float] = None
    players: dict[PlayerId, PlayerModel] = field(default_factory=dict)

    @classmethod
    def empty(cls, game_id: str) -> GameModel:
        return cls(game_id=game_id)

    @classmethod
    def from_document(cls, game_id: str, document: Any) -> GameModel:
        """A missing or malformed document is an empty game, never an error."""
        if not isinstance(document, dict):
            return cls.empty(game_id)

        raw_players = document.get("players")
        players: dict[PlayerId, PlayerModel] = {}
        if isinstance(raw_players, dict):
            for player_id, raw_player in raw_players.items():
                player = PlayerModel.from_document(raw_player)
                if player is not None:
                    players[str(player_id)] = player

        created_at = document.get("createdAt")
        return cls(
            game_id=game_id,
            name=document.get("name"),
            password=document.get("password"),
            created_at=(
                float(created_at) if isinstance(created_at, (int, float)) else None
            ),
            players=players,
        )

    def to_document(self) -> Document:
        return {
            "name": self.name,
            "password": self.password,
            "createdAt": self.created_at,
            "players": {
                player_id: player.to_document()
                for player_id, player in self.players.items()
            },
        }

    @property
    def has_password(self) -> bool:
        return bool(self.password)


T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Explicit success/failure value. Store-facing operations return these instead of raising."""

    ok: bool
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def success(cls, value: Optional[T] = None) -> Outcome[T]:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ErrorKind, message: str = "") -> Outcome[T]:
        return cls(ok=False, error=error, message=message)


def _as_int(value: Any, default: int) -> int:
    # bool is an int subclass, but a stored True is never a meaningful count
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return int(value)
