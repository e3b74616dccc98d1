"""
Logical intents a client can submit.

An intent says WHAT a player wants to happen ("take 5 life off Alice"), never which fields to write.
Translating an intent into field writes is the job of src/board/paths.py.
"""

from dataclasses import dataclass
from typing import Optional

from src.core.models import EffectName, PlayerId
from src.core.shared_types import PlayerColor


@dataclass(frozen=True)
class AdjustLife:
    player_id: PlayerId
    delta: int


@dataclass(frozen=True)
class ToggleEffect:
    player_id: PlayerId
    effect: EffectName


@dataclass(frozen=True)
class AdjustEffect:
    player_id: PlayerId
    effect: EffectName
    delta: int


@dataclass(frozen=True)
class AdjustCommanderDamage:
    """Damage dealt TO target_id BY source_id's commander. Never mirrored onto source_id."""

    target_id: PlayerId
    source_id: PlayerId
    delta: int


@dataclass(frozen=True)
class SetColor:
    player_id: PlayerId
    color: PlayerColor


@dataclass(frozen=True)
class RenamePlayer:
    player_id: PlayerId
    name: str


@dataclass(frozen=True)
class RemovePlayer:
    player_id: PlayerId


@dataclass(frozen=True)
class ResetGame:
    pass


@dataclass(frozen=True)
class AddPlayer:
    """All fields optional: a default name, a fresh id and the current time are filled in when absent."""

    name: Optional[str] = None
    player_id: Optional[PlayerId] = None
    joined_at: Optional[int] = None


Intent = (
    AdjustLife
    | ToggleEffect
    | AdjustEffect
    | AdjustCommanderDamage
    | SetColor
    | RenamePlayer
    | RemovePlayer
    | ResetGame
    | AddPlayer
)
