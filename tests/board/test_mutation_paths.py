"""Unit tests for src/board/paths.py"""

import random

import pytest

from src.board.intents import (
    AddPlayer,
    AdjustCommanderDamage,
    AdjustEffect,
    AdjustLife,
    RemovePlayer,
    RenamePlayer,
    ResetGame,
    SetColor,
    ToggleEffect,
)
from src.board.paths import (
    build_updates,
    commander_damage_path,
    effect_path,
    life_path,
    next_free_color,
    player_path,
)
from src.core.exceptions import (
    CapacityError,
    InvalidRequestError,
    NotFoundError,
    UnknownEffectError,
)
from src.core.models import MAX_PLAYERS, GameModel, PlayerModel
from src.core.paths import DELETE, apply_path_updates
from src.core.shared_types import PlayerColor


def apply(game: GameModel, intent: object) -> GameModel:
    """Helper: build the updates and apply them the way a store would."""
    updates = build_updates(game, intent)
    document = apply_path_updates(game.to_document(), updates)
    return GameModel.from_document(game.game_id, document)


def full_game() -> GameModel:
    return GameModel(
        game_id="full",
        players={
            f"p{i}": PlayerModel(name=f"P{i}", color=color.value, joined_at=i)
            for i, color in enumerate(PlayerColor)
        },
    )


# -- PATHS --
def test_paths() -> None:
    assert life_path("a") == "players.a.life"
    assert effect_path("a", "poison") == "players.a.effects.poison"
    assert commander_damage_path("a", "b") == "players.a.commanderDamage.b"
    assert player_path("a") == "players.a"


# -- LIFE --
@pytest.mark.parametrize("delta, expected", [(-1, 39), (10, 50), (-45, -5)])
def test_adjust_life(three_player_game: GameModel, delta: int, expected: int) -> None:
    """Single leaf, no floor."""
    updates = build_updates(three_player_game, AdjustLife("a", delta))
    assert updates == {"players.a.life": expected}


def test_adjust_life_unknown_player(three_player_game: GameModel) -> None:
    with pytest.raises(NotFoundError):
        build_updates(three_player_game, AdjustLife("nobody", -1))


# -- FLAG EFFECTS --
def test_toggle_effect(three_player_game: GameModel) -> None:
    assert build_updates(three_player_game, ToggleEffect("a", "monarch")) == {
        "players.a.effects.monarch": True
    }


def test_toggle_absent_effect_defaults_to_false(three_player_game: GameModel) -> None:
    three_player_game.players["a"].effects = {}
    assert build_updates(three_player_game, ToggleEffect("a", "initiative")) == {
        "players.a.effects.initiative": True
    }


@pytest.mark.parametrize("toggles", range(1, 6))
def test_toggle_parity(three_player_game: GameModel, toggles: int) -> None:
    game = three_player_game
    for _ in range(toggles):
        game = apply(game, ToggleEffect("b", "monarch"))
    assert game.players["b"].effects["monarch"] is (toggles % 2 == 1)


def test_cannot_toggle_counter(three_player_game: GameModel) -> None:
    with pytest.raises(InvalidRequestError):
        build_updates(three_player_game, ToggleEffect("a", "poison"))


def test_cannot_toggle_unknown_effect(three_player_game: GameModel) -> None:
    with pytest.raises(UnknownEffectError):
        build_updates(three_player_game, ToggleEffect("a", "sleepy"))


# -- COUNTER EFFECTS --
@pytest.mark.parametrize(
    "deltas",
    [[1, 1, 1], [-1], [3, -5, 2], [4, 4, 4, -2], [12], [5, -10, 1]],
)
def test_counter_never_negative(three_player_game: GameModel, deltas: list[int]) -> None:
    game = three_player_game
    expected = 0
    for delta in deltas:
        game = apply(game, AdjustEffect("c", "poison", delta))
        expected = max(0, expected + delta)
        assert game.players["c"].effects["poison"] == expected
        assert game.players["c"].effects["poison"] >= 0


def test_counter_has_no_storage_ceiling(three_player_game: GameModel) -> None:
    three_player_game.players["a"].effects["poison"] = 10
    assert build_updates(three_player_game, AdjustEffect("a", "poison", 5)) == {
        "players.a.effects.poison": 15
    }


def test_cannot_adjust_flag(three_player_game: GameModel) -> None:
    with pytest.raises(InvalidRequestError):
        build_updates(three_player_game, AdjustEffect("a", "monarch", 1))


# -- COMMANDER DAMAGE --
def test_commander_damage_is_not_symmetric(three_player_game: GameModel) -> None:
    game = apply(three_player_game, AdjustCommanderDamage("a", "b", 7))
    game = apply(game, AdjustCommanderDamage("b", "a", 2))
    assert game.players["a"].commander_damage == {"b": 7}
    assert game.players["b"].commander_damage == {"a": 2}


def test_commander_damage_floor(three_player_game: GameModel) -> None:
    three_player_game.players["a"].commander_damage = {"b": 2}
    assert build_updates(three_player_game, AdjustCommanderDamage("a", "b", -5)) == {
        "players.a.commanderDamage.b": 0
    }


def test_commander_damage_touches_one_leaf(three_player_game: GameModel) -> None:
    updates = build_updates(three_player_game, AdjustCommanderDamage("a", "c", 1))
    assert list(updates) == ["players.a.commanderDamage.c"]


def test_commander_damage_from_self(three_player_game: GameModel) -> None:
    with pytest.raises(InvalidRequestError):
        build_updates(three_player_game, AdjustCommanderDamage("a", "a", 1))


def test_commander_damage_unknown_source(three_player_game: GameModel) -> None:
    with pytest.raises(NotFoundError):
        build_updates(three_player_game, AdjustCommanderDamage("a", "ghost", 1))


# -- COLOR / NAME --
def test_set_free_color(three_player_game: GameModel) -> None:
    assert build_updates(three_player_game, SetColor("a", PlayerColor.TEAL)) == {
        "players.a.color": "teal"
    }


def test_set_own_color_again(three_player_game: GameModel) -> None:
    assert build_updates(three_player_game, SetColor("a", PlayerColor.PURPLE)) == {
        "players.a.color": "purple"
    }


def test_set_taken_color(three_player_game: GameModel) -> None:
    with pytest.raises(InvalidRequestError):
        build_updates(three_player_game, SetColor("a", PlayerColor.BLUE))


def test_set_unknown_color(three_player_game: GameModel) -> None:
    with pytest.raises(InvalidRequestError, match="magenta"):
        build_updates(three_player_game, SetColor("a", "magenta"))


def test_rename(three_player_game: GameModel) -> None:
    assert build_updates(three_player_game, RenamePlayer("b", "  Robert ")) == {
        "players.b.name": "Robert"
    }
    with pytest.raises(InvalidRequestError):
        build_updates(three_player_game, RenamePlayer("b", "   "))


# -- REMOVE --
def test_remove_player(three_player_game: GameModel) -> None:
    assert build_updates(three_player_game, RemovePlayer("b")) == {"players.b": DELETE}
    game = apply(three_player_game, RemovePlayer("b"))
    assert sorted(game.players) == ["a", "c"]


def test_remove_unknown_player(three_player_game: GameModel) -> None:
    with pytest.raises(NotFoundError):
        build_updates(three_player_game, RemovePlayer("nobody"))


# -- RESET --
def test_reset_game(three_player_game: GameModel) -> None:
    game = three_player_game
    game = apply(game, AdjustLife("a", -13))
    game = apply(game, AdjustEffect("b", "poison", 4))
    game = apply(game, ToggleEffect("c", "monarch"))
    game = apply(game, AdjustCommanderDamage("a", "c", 6))
    before = game

    after = apply(game, ResetGame())

    assert sorted(after.players) == sorted(before.players)
    for player_id, player in after.players.items():
        assert player.life == 40
        assert player.effects == {"poison": 0, "monarch": False, "initiative": False}
        assert player.commander_damage == {}
        assert player.name == before.players[player_id].name
        assert player.color == before.players[player_id].color
        assert player.joined_at == before.players[player_id].joined_at


def test_reset_empty_game() -> None:
    assert build_updates(GameModel(game_id="g"), ResetGame()) == {}


def test_reset_does_not_replace_players(three_player_game: GameModel) -> None:
    updates = build_updates(three_player_game, ResetGame())
    assert "players.a" not in updates
    assert "players.a.name" not in updates
    assert "players.a.color" not in updates


# -- ADD --
def test_add_player(three_player_game: GameModel) -> None:
    updates = build_updates(
        three_player_game, AddPlayer(name="Dana", player_id="d", joined_at=99)
    )
    assert updates == {
        "players.d": {
            "name": "Dana",
            "life": 40,
            "color": "orange",
            "effects": {"poison": 0, "monarch": False, "initiative": False},
            "commanderDamage": {},
            "joinedAt": 99,
        }
    }


def test_add_player_defaults(three_player_game: GameModel) -> None:
    updates = build_updates(three_player_game, AddPlayer())
    ((path, player),) = updates.items()
    assert path.startswith("players.")
    assert player["name"] == "Player 4"
    assert player["joinedAt"] > 0


def test_add_player_fresh_ids(three_player_game: GameModel) -> None:
    first = build_updates(three_player_game, AddPlayer())
    second = build_updates(three_player_game, AddPlayer())
    assert first.keys() != second.keys()


def test_add_existing_id(three_player_game: GameModel) -> None:
    with pytest.raises(InvalidRequestError):
        build_updates(three_player_game, AddPlayer(player_id="a"))


def test_add_player_when_full() -> None:
    game = full_game()
    assert len(game.players) == MAX_PLAYERS
    with pytest.raises(CapacityError):
        build_updates(game, AddPlayer(name="ninth"))


def test_next_free_color_in_palette_order() -> None:
    game = GameModel(game_id="g")
    assert next_free_color(game) == PlayerColor.PURPLE
    game.players["x"] = PlayerModel(color="purple")
    game.players["y"] = PlayerModel(color="green")
    assert next_free_color(game) == PlayerColor.BLUE


def test_next_free_color_all_taken() -> None:
    """With every color in use, fall back on a random palette entry."""
    game = full_game()
    color = next_free_color(game, rng=random.Random(7))
    assert color in list(PlayerColor)


def test_unknown_intent(three_player_game: GameModel) -> None:
    with pytest.raises(InvalidRequestError):
        build_updates(three_player_game, "do a barrel roll")  # type: ignore[arg-type]
