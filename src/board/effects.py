"""
Effect policy
-----

Single source of truth for what each tracked status effect is and how it behaves.
Every other module asks this one instead of special-casing effect names.

Two shapes of effect exist:
* counter: integer, floored at 0, never capped in storage. A soft cap only drives the "critical" display tier.
* flag: boolean, toggled on/off.
"""

from dataclasses import dataclass
from typing import Any, Optional

from src.core.exceptions import UnknownEffectError
from src.core.models import EffectName, EffectValue, PlayerModel
from src.core.shared_types import DisplayTier, EffectKind

POISON = "poison"
MONARCH = "monarch"
INITIATIVE = "initiative"

# Fixed game rule: 10 poison counters and you are out, no matter the life total.
POISON_LETHAL = 10


@dataclass(frozen=True)
class EffectSpec:
    name: EffectName
    kind: EffectKind
    label: str
    soft_cap: Optional[int] = None

    @property
    def default(self) -> EffectValue:
        return 0 if self.kind == EffectKind.COUNTER else False


EFFECTS: dict[EffectName, EffectSpec] = {
    spec.name: spec
    for spec in (
        EffectSpec(POISON, EffectKind.COUNTER, "Poison", soft_cap=POISON_LETHAL),
        EffectSpec(MONARCH, EffectKind.FLAG, "Monarch"),
        EffectSpec(INITIATIVE, EffectKind.FLAG, "Initiative"),
    )
}

# (upper bound exclusive, tier). Anything at or above the last bound is critical.
TIER_BOUNDS: tuple[tuple[int, DisplayTier], ...] = (
    (3, DisplayTier.LOW),
    (7, DisplayTier.MID),
    (POISON_LETHAL, DisplayTier.HIGH),
)


def effect_spec(name: EffectName) -> EffectSpec:
    try:
        return EFFECTS[name]
    except KeyError:
        raise UnknownEffectError(
            f"Unknown effect {name!r}. Pick one from {', '.join(EFFECTS)}."
        ) from None


def is_counter_effect(name: EffectName) -> bool:
    return effect_spec(name).kind == EffectKind.COUNTER


def is_flag_effect(name: EffectName) -> bool:
    return effect_spec(name).kind == EffectKind.FLAG


def clamp(name: EffectName, raw_value: Any) -> EffectValue:
    """Coerce a raw value into what may be stored for this effect (floor 0 for counters, plain bool for flags)."""
    if is_counter_effect(name):
        if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)):
            return 0
        return max(0, int(raw_value))
    return bool(raw_value)


def current_value(effects: dict[EffectName, EffectValue], name: EffectName) -> EffectValue:
    """Stored value of an effect, or its default if absent / garbage."""
    spec = effect_spec(name)
    if name not in effects:
        return spec.default
    return clamp(name, effects[name])


def default_effects() -> dict[EffectName, EffectValue]:
    return {name: spec.default for name, spec in EFFECTS.items()}


def is_defeated(player: PlayerModel) -> bool:
    """Derived display condition: life below 1, or lethal poison. Not configurable."""
    return player.life < 1 or current_value(player.effects, POISON) >= POISON_LETHAL


def display_tier(counter_value: int) -> DisplayTier:
    for bound, tier in TIER_BOUNDS:
        if counter_value < bound:
            return tier
    return DisplayTier.CRITICAL


def visible_effects(
    effects: dict[EffectName, EffectValue],
) -> list[tuple[EffectName, EffectValue]]:
    """
    Effects worth showing as a badge: registered, and not at their default (0 / False).
    Sorted by name so badges do not jump around as updates come in.
    """
    visible = []
    for name in sorted(effects):
        if name not in EFFECTS:
            continue
        value = clamp(name, effects[name])
        if value != EFFECTS[name].default:
            visible.append((name, value))
    return visible
