from __future__ import annotations

import math

from dominion_combat.domain.types import CombatStance
from dominion_combat.rules.ruleset import Ruleset, StanceModifiers

_STANCE_NAMES = frozenset(stance.value for stance in CombatStance)


def stance_modifiers(stance: CombatStance, rules: Ruleset | None = None) -> StanceModifiers:
    rules = rules or Ruleset.default()
    return rules.stance(stance)


def is_valid_stance(value: object) -> bool:
    return isinstance(value, str) and value in _STANCE_NAMES


def parse_stance(value: str) -> CombatStance:
    if not is_valid_stance(value):
        valid = ", ".join(sorted(_STANCE_NAMES))
        raise ValueError(f"Unknown stance {value!r}; expected one of: {valid}")
    return CombatStance(value)


def all_stances() -> list[CombatStance]:
    return list(CombatStance)


def default_stance() -> CombatStance:
    return CombatStance.BALANCED


def effective_attack_mod(base_attack_mod: int, stance: CombatStance, rules: Ruleset | None = None) -> int:
    return base_attack_mod + stance_modifiers(stance, rules).attack_mod


def effective_defense(base_defense: int, stance: CombatStance, rules: Ruleset | None = None) -> int:
    return base_defense + stance_modifiers(stance, rules).defense_mod


def apply_casualty_modifier(damage: float, stance: CombatStance, rules: Ruleset | None = None) -> int:
    """Scale incoming damage by the receiving side's stance, rounded down."""
    return math.floor(damage * stance_modifiers(stance, rules).casualty_multiplier)
