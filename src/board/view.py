"""Read-only projection of a game into what a board renders: one tile per player, in a stable order."""

from dataclasses import dataclass, field
from typing import Optional

from src.board import effects
from src.core.models import EffectName, EffectValue, GameModel, PlayerId, PlayerModel
from src.core.shared_types import DisplayTier


@dataclass(frozen=True)
class EffectBadge:
    name: EffectName
    label: str
    value: EffectValue
    tier: Optional[DisplayTier] = None  # counters only


@dataclass(frozen=True)
class CommanderDamageBadge:
    source_id: PlayerId
    source_name: str
    damage: int


@dataclass(frozen=True)
class TileView:
    player_id: PlayerId
    name: str
    life: int
    color: Optional[str]
    defeated: bool
    effects: tuple[EffectBadge, ...] = field(default_factory=tuple)
    commander_damage: tuple[CommanderDamageBadge, ...] = field(default_factory=tuple)


def ordered_players(game: GameModel) -> list[tuple[PlayerId, PlayerModel]]:
    """
    Join order, ties broken by id.
    Depends on the document only: realtime updates arriving in a different order never reshuffle the board.
    """
    return sorted(
        game.players.items(), key=lambda item: (item[1].joined_at, item[0])
    )


def build_board(game: GameModel) -> list[TileView]:
    return [
        TileView(
            player_id=player_id,
            name=player.name,
            life=player.life,
            color=player.color,
            defeated=effects.is_defeated(player),
            effects=_effect_badges(player),
            commander_damage=_commander_damage_badges(game, player),
        )
        for player_id, player in ordered_players(game)
    ]


def _effect_badges(player: PlayerModel) -> tuple[EffectBadge, ...]:
    badges = []
    for name, value in effects.visible_effects(player.effects):
        spec = effects.effect_spec(name)
        tier = effects.display_tier(value) if effects.is_counter_effect(name) else None
        badges.append(EffectBadge(name=name, label=spec.label, value=value, tier=tier))
    return tuple(badges)


def _commander_damage_badges(
    game: GameModel, player: PlayerModel
) -> tuple[CommanderDamageBadge, ...]:
    # Sources that left the game are skipped, their stale entries are still in the document.
    return tuple(
        CommanderDamageBadge(
            source_id=source_id,
            source_name=game.players[source_id].name,
            damage=damage,
        )
        for source_id, damage in sorted(player.commander_damage.items())
        if damage >= 1 and source_id in game.players
    )
