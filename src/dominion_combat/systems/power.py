from __future__ import annotations

import math

from dominion_combat.domain.types import Force, UnitType
from dominion_combat.rules.ruleset import Ruleset


def calculate_unified_power(force: Force, is_defender: bool = False, rules: Ruleset | None = None) -> float:
    rules = rules or Ruleset.default()
    power = sum(count * rules.profile(unit).unified_power for unit, count in force.items() if count > 0)
    if is_defender:
        power *= rules.unified.defender_bonus
    return power


def count_unit_types(force: Force) -> int:
    return len(force.present())


def calculate_diversity_bonus(force: Force, rules: Ruleset | None = None) -> float:
    config = (rules or Ruleset.default()).fleet_power
    if count_unit_types(force) >= config.diversity_min_unit_types:
        return config.diversity_bonus
    return 1.0


def calculate_fleet_power(force: Force, is_defender: bool = False, rules: Ruleset | None = None) -> float:
    """Fleet power for the older power-ratio model. Soldiers fight on the ground and add nothing."""
    rules = rules or Ruleset.default()
    config = rules.fleet_power
    power = 0.0
    for unit, count in force.items():
        if count <= 0 or unit is UnitType.SOLDIERS:
            continue
        per_unit = rules.profile(unit).fleet_power
        if unit is UnitType.STATIONS and is_defender:
            per_unit *= config.station_defense_multiplier
        power += count * per_unit
    power *= calculate_diversity_bonus(force, rules)
    if is_defender:
        power *= config.defender_advantage
    return power


def calculate_power_ratio(attacker: Force, defender: Force, rules: Ruleset | None = None) -> float:
    attack_power = calculate_fleet_power(attacker, False, rules)
    defense_power = calculate_fleet_power(defender, True, rules)
    if defense_power == 0:
        return math.inf if attack_power > 0 else 1.0
    return attack_power / defense_power


def apply_underdog_bonus(my_power: float, opponent_power: float, rules: Ruleset | None = None) -> float:
    """Boost a heavily outmatched side, scaling linearly up to the configured cap."""
    config = (rules or Ruleset.default()).underdog
    if opponent_power == 0:
        return my_power
    ratio = my_power / opponent_power
    if ratio >= config.power_ratio_threshold:
        return my_power
    multiplier = 1 + (config.power_bonus_max - 1) * (1 - ratio / config.power_ratio_threshold)
    return my_power * min(multiplier, config.power_bonus_max)


def calculate_networth_underdog_bonus(
    attacker_networth: float, defender_networth: float, rules: Ruleset | None = None
) -> float:
    config = (rules or Ruleset.default()).underdog
    if not config.networth_enabled or attacker_networth <= 0 or defender_networth <= 0:
        return 1.0
    ratio = attacker_networth / defender_networth
    if ratio >= config.networth_threshold:
        return 1.0
    spread = config.networth_bonus_max - config.networth_bonus_min
    bonus = config.networth_bonus_min + spread * (1 - ratio / config.networth_threshold)
    return min(config.networth_bonus_max, bonus)


def calculate_punchup_bonus(
    attacker_networth: float,
    defender_networth: float,
    attacker_won: bool,
    rules: Ruleset | None = None,
) -> int:
    """Extra sectors for a weaker empire that beats a stronger one."""
    config = (rules or Ruleset.default()).underdog
    if not config.punchup_enabled or not attacker_won:
        return 0
    if attacker_networth <= 0 or defender_networth <= 0:
        return 0
    ratio = attacker_networth / defender_networth
    if ratio >= config.punchup_threshold:
        return 0
    scale = (config.punchup_max_extra_sectors - 1) * (1 - ratio / config.punchup_threshold)
    return min(config.punchup_max_extra_sectors, 1 + math.floor(scale + 0.5))


def apply_underdog_bonuses(
    attacker_power: float,
    defender_power: float,
    *,
    attacker_networth: float = 0.0,
    defender_networth: float = 0.0,
    rules: Ruleset | None = None,
) -> float:
    """Power-ratio bonus first, then the networth multiplier on top."""
    boosted = apply_underdog_bonus(attacker_power, defender_power, rules)
    return boosted * calculate_networth_underdog_bonus(attacker_networth, defender_networth, rules)
