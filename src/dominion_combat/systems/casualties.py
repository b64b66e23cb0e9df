"""Power-ratio loss rates shared by the single-roll strategy and raid bookkeeping."""

from __future__ import annotations

import math
from typing import Collection

from dominion_combat.domain.types import Force, UnitType
from dominion_combat.rules.ruleset import Ruleset


def calculate_loss_rate(attack_power: float, defense_power: float, rules: Ruleset | None = None) -> float:
    """Loss rate suffered by a side attacking with ``attack_power`` into ``defense_power``."""
    config = (rules or Ruleset.default()).casualties
    if attack_power <= 0:
        return config.max_loss_rate
    if defense_power <= 0:
        return config.min_loss_rate

    ratio = defense_power / attack_power
    rate = config.base_loss_rate
    if ratio > config.bad_attack_ratio:
        rate += config.bad_attack_penalty
    elif ratio < config.overwhelming_ratio:
        rate -= config.overwhelming_bonus
    return min(config.max_loss_rate, max(config.min_loss_rate, rate))


def calculate_variance(random_value: float, rules: Ruleset | None = None) -> float:
    config = (rules or Ruleset.default()).casualties
    return config.variance_min + random_value * (config.variance_max - config.variance_min)


def calculate_casualties(units: int, loss_rate: float, variance: float) -> int:
    if units <= 0:
        return 0
    return min(units, max(0, math.floor(units * loss_rate * variance)))


def calculate_combat_casualties(
    units: int,
    attack_power: float,
    defense_power: float,
    random_value: float,
    rules: Ruleset | None = None,
) -> int:
    rate = calculate_loss_rate(attack_power, defense_power, rules)
    return calculate_casualties(units, rate, calculate_variance(random_value, rules))


def force_casualties(
    force: Force,
    loss_rate: float,
    variance: float,
    *,
    exempt: Collection[UnitType] = (),
) -> Force:
    return Force(
        **{
            unit.value: 0 if unit in exempt else calculate_casualties(count, loss_rate, variance)
            for unit, count in force.items()
        }
    )


def calculate_retreat_casualties(units: int, rules: Ruleset | None = None) -> int:
    config = (rules or Ruleset.default()).casualties
    if units <= 0:
        return 0
    return math.floor(units * config.retreat_loss_rate)
