"""Army effectiveness: the one combat value that persists between turns.

The caller owns the stored number and moves it only through the update
functions here. Every update clamps to the configured range.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from dominion_combat.domain.types import CombatOutcome
from dominion_combat.rules.ruleset import Ruleset

logger = logging.getLogger(__name__)

# Keeps a draw of exactly 1.0 inside the victory bonus range.
_MAX_BONUS_DRAW = 0.9999


class EffectivenessEvent(str, Enum):
    COMBAT = "combat"
    RECOVERY = "recovery"
    MAINTENANCE_UNPAID = "maintenance_unpaid"
    CUSTOM = "custom"


@dataclass(frozen=True)
class EffectivenessUpdate:
    previous: float
    current: float
    change: float
    reason: str


def default_effectiveness(rules: Ruleset | None = None) -> float:
    return (rules or Ruleset.default()).effectiveness.default


def clamp_effectiveness(value: float, rules: Ruleset | None = None) -> float:
    config = (rules or Ruleset.default()).effectiveness
    return min(config.max, max(config.min, value))


def combat_effectiveness_change(
    outcome: CombatOutcome, random_value: float, rules: Ruleset | None = None
) -> float:
    config = (rules or Ruleset.default()).effectiveness
    if outcome is CombatOutcome.VICTORY:
        spread = config.victory_bonus_max - config.victory_bonus_min + 1
        draw = min(max(random_value, 0.0), _MAX_BONUS_DRAW)
        return float(config.victory_bonus_min + math.floor(draw * spread))
    if outcome is CombatOutcome.DEFEAT:
        return -config.defeat_penalty
    return config.draw_change


def _update(current: float, change: float, reason: str, rules: Ruleset | None) -> EffectivenessUpdate:
    updated = clamp_effectiveness(current + change, rules)
    return EffectivenessUpdate(
        previous=current,
        current=updated,
        change=updated - current,
        reason=reason,
    )


def apply_combat_outcome(
    current: float,
    outcome: CombatOutcome,
    random_value: float,
    rules: Ruleset | None = None,
) -> EffectivenessUpdate:
    change = combat_effectiveness_change(outcome, random_value, rules)
    return _update(current, change, f"combat {outcome.value}", rules)


def apply_recovery(current: float, rules: Ruleset | None = None) -> EffectivenessUpdate:
    config = (rules or Ruleset.default()).effectiveness
    return _update(current, config.recovery_per_turn, "natural recovery", rules)


def apply_unpaid_maintenance(current: float, rules: Ruleset | None = None) -> EffectivenessUpdate:
    config = (rules or Ruleset.default()).effectiveness
    return _update(current, -config.unpaid_maintenance_penalty, "maintenance unpaid", rules)


def apply_custom_change(
    current: float, delta: float, reason: str = "custom", rules: Ruleset | None = None
) -> EffectivenessUpdate:
    return _update(current, delta, reason, rules)


def update_effectiveness(
    current: float,
    event: EffectivenessEvent,
    *,
    outcome: CombatOutcome | None = None,
    random_value: float = 0.0,
    delta: float = 0.0,
    reason: str | None = None,
    rules: Ruleset | None = None,
) -> EffectivenessUpdate:
    if event is EffectivenessEvent.COMBAT:
        if outcome is None:
            raise ValueError("combat effectiveness update needs an outcome")
        return apply_combat_outcome(current, outcome, random_value, rules)
    if event is EffectivenessEvent.RECOVERY:
        return apply_recovery(current, rules)
    if event is EffectivenessEvent.MAINTENANCE_UNPAID:
        update = apply_unpaid_maintenance(current, rules)
        if update.current <= 0:
            logger.warning("Army effectiveness exhausted by unpaid maintenance")
        return update
    return apply_custom_change(current, delta, reason or "custom", rules)


def calculate_combat_modifier(effectiveness: float) -> float:
    return effectiveness / 100.0


def calculate_effective_power(base_power: float, effectiveness: float) -> float:
    return base_power * calculate_combat_modifier(effectiveness)


def calculate_recovery_turns(
    current: float, target: float | None = None, rules: Ruleset | None = None
) -> int:
    """Turns of natural recovery needed to climb from ``current`` to ``target``."""
    config = (rules or Ruleset.default()).effectiveness
    goal = config.max if target is None else clamp_effectiveness(target, rules)
    if current >= goal or config.recovery_per_turn <= 0:
        return 0
    return math.ceil((goal - current) / config.recovery_per_turn)
