"""
Mutation path builder
-----

Turns a logical intent into the exact set of leaf paths (and their new values) to write to the shared document.

Key idea: never replace a whole player (or the whole game) when a leaf will do.
Two clients editing different leaves of the same player concurrently must both land, which only works if each
of them writes just its own leaf. The caller sends the returned map as one atomic multi-path update.

Same strategy pattern as elsewhere: one builder function per intent type, looked up in INTENT_BUILDERS.
"""

import random
import time
from typing import Callable, Optional
from uuid import uuid4

from src.board import effects
from src.board.intents import (
    AddPlayer,
    AdjustCommanderDamage,
    AdjustEffect,
    AdjustLife,
    Intent,
    RemovePlayer,
    RenamePlayer,
    ResetGame,
    SetColor,
    ToggleEffect,
)
from src.core.exceptions import CapacityError, InvalidRequestError, NotFoundError
from src.core.models import MAX_PLAYERS, STARTING_LIFE, GameModel, PlayerId, PlayerModel
from src.core.paths import DELETE, PathUpdates, join_path
from src.core.shared_types import PlayerColor

PLAYERS = "players"


# --- PATHS ---
def player_path(player_id: PlayerId, *fields: str) -> str:
    return join_path(PLAYERS, player_id, *fields)


def life_path(player_id: PlayerId) -> str:
    return player_path(player_id, "life")


def effect_path(player_id: PlayerId, effect: str) -> str:
    return player_path(player_id, "effects", effect)


def commander_damage_path(target_id: PlayerId, source_id: PlayerId) -> str:
    return player_path(target_id, "commanderDamage", source_id)


# --- BUILDERS ---
def build_updates(game: GameModel, intent: Intent) -> PathUpdates:
    """
    Entry point. Raises:
    * NotFoundError: intent refers to a player that is not in the game
    * CapacityError: AddPlayer on a full game
    * InvalidRequestError: anything else that does not make sense (unknown effect, wrong effect kind, ...)
    """
    try:
        builder = INTENT_BUILDERS[type(intent)]
    except KeyError:
        raise InvalidRequestError(f"No builder for intent {intent!r}.") from None
    return builder(game, intent)


def adjust_life(game: GameModel, intent: AdjustLife) -> PathUpdates:
    # No floor: negative life is legal, "defeated" is derived at display time.
    player = _player(game, intent.player_id)
    return {life_path(intent.player_id): player.life + intent.delta}


def toggle_effect(game: GameModel, intent: ToggleEffect) -> PathUpdates:
    if not effects.is_flag_effect(intent.effect):
        raise InvalidRequestError(
            f"Effect {intent.effect!r} is a counter. Adjust it instead of toggling."
        )
    player = _player(game, intent.player_id)
    current = effects.current_value(player.effects, intent.effect)
    return {effect_path(intent.player_id, intent.effect): not current}


def adjust_effect(game: GameModel, intent: AdjustEffect) -> PathUpdates:
    if not effects.is_counter_effect(intent.effect):
        raise InvalidRequestError(
            f"Effect {intent.effect!r} is a flag. Toggle it instead of adjusting."
        )
    player = _player(game, intent.player_id)
    current = effects.current_value(player.effects, intent.effect)
    new_value = effects.clamp(intent.effect, current + intent.delta)
    return {effect_path(intent.player_id, intent.effect): new_value}


def adjust_commander_damage(
    game: GameModel, intent: AdjustCommanderDamage
) -> PathUpdates:
    if intent.source_id == intent.target_id:
        raise InvalidRequestError("A commander cannot damage its own player.")
    target = _player(game, intent.target_id)
    _player(game, intent.source_id)
    current = target.commander_damage.get(intent.source_id, 0)
    return {
        commander_damage_path(intent.target_id, intent.source_id): max(
            0, current + intent.delta
        )
    }


def set_color(game: GameModel, intent: SetColor) -> PathUpdates:
    """
    NOTE: the uniqueness check is advisory. Two clients picking the same color at the same time both succeed;
    the store has no constraint to stop them.
    """
    _player(game, intent.player_id)
    try:
        color = PlayerColor(intent.color)
    except ValueError:
        raise InvalidRequestError(f"Unknown color {intent.color!r}.") from None
    holders = [
        player_id
        for player_id, player in game.players.items()
        if player.color == color and player_id != intent.player_id
    ]
    if holders:
        raise InvalidRequestError(f"Color {color} is already taken.")
    return {player_path(intent.player_id, "color"): color.value}


def rename_player(game: GameModel, intent: RenamePlayer) -> PathUpdates:
    _player(game, intent.player_id)
    name = intent.name.strip()
    if not name:
        raise InvalidRequestError("Player name cannot be blank.")
    return {player_path(intent.player_id, "name"): name}


def remove_player(game: GameModel, intent: RemovePlayer) -> PathUpdates:
    # Commander damage others took from this player stays behind; the board view hides unknown sources.
    _player(game, intent.player_id)
    return {player_path(intent.player_id): DELETE}


def reset_game(game: GameModel, intent: ResetGame) -> PathUpdates:
    """Counters back to their starting values. Identity, name and color are not touched."""
    updates: PathUpdates = {}
    for player_id in game.players:
        updates[life_path(player_id)] = STARTING_LIFE
        updates[player_path(player_id, "effects")] = effects.default_effects()
        updates[player_path(player_id, "commanderDamage")] = {}
    return updates


def add_player(game: GameModel, intent: AddPlayer) -> PathUpdates:
    if len(game.players) >= MAX_PLAYERS:
        raise CapacityError(f"Game already has {MAX_PLAYERS} players.")

    player_id = intent.player_id or uuid4().hex
    if player_id in game.players:
        raise InvalidRequestError(f"Player {player_id!r} already exists.")

    name = (intent.name or "").strip() or f"Player {len(game.players) + 1}"
    new_player = PlayerModel(
        name=name,
        life=STARTING_LIFE,
        color=next_free_color(game).value,
        effects=effects.default_effects(),
        commander_damage={},
        joined_at=intent.joined_at if intent.joined_at is not None else now_ms(),
    )
    return {player_path(player_id): new_player.to_document()}


INTENT_BUILDERS: dict[type, Callable[[GameModel, Intent], PathUpdates]] = {
    AdjustLife: adjust_life,
    ToggleEffect: toggle_effect,
    AdjustEffect: adjust_effect,
    AdjustCommanderDamage: adjust_commander_damage,
    SetColor: set_color,
    RenamePlayer: rename_player,
    RemovePlayer: remove_player,
    ResetGame: reset_game,
    AddPlayer: add_player,
}


# -- Internal helpers --
def next_free_color(
    game: GameModel, rng: Optional[random.Random] = None
) -> PlayerColor:
    """First palette entry nobody holds. If every color is taken, a uniformly random one."""
    taken = {player.color for player in game.players.values()}
    for color in PlayerColor:
        if color.value not in taken:
            return color
    return (rng or random).choice(list(PlayerColor))


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def _player(game: GameModel, player_id: PlayerId) -> PlayerModel:
    player = game.players.get(player_id)
    if player is None:
        raise NotFoundError(f"Player {player_id!r} not found in game {game.game_id!r}.")
    return player
