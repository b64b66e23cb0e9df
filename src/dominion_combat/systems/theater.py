"""Theater control analysis.

Bonuses come from force composition alone, so they are worked out once from
the forces that start the battle and held for every volley.
"""

from __future__ import annotations

import logging

from dominion_combat.domain.battle_models import TheaterAnalysis, TheaterBonus
from dominion_combat.domain.types import Force, Side, Theater, UnitType
from dominion_combat.rules.ruleset import Ruleset

logger = logging.getLogger(__name__)

SPACE_DOMINANCE = "Space Dominance"
ORBITAL_SHIELD = "Orbital Shield"
GROUND_SUPERIORITY = "Ground Superiority"


def unit_theater(unit: UnitType, rules: Ruleset | None = None) -> Theater:
    rules = rules or Ruleset.default()
    return rules.profile(unit).theater


def units_in_theater(theater: Theater, rules: Ruleset | None = None) -> list[UnitType]:
    rules = rules or Ruleset.default()
    return [unit for unit in UnitType if unit in rules.units and rules.units[unit].theater is theater]


def count_units_in_theater(force: Force, theater: Theater, rules: Ruleset | None = None) -> int:
    return sum(force.count(unit) for unit in units_in_theater(theater, rules))


def _dominates(mine: int, theirs: int, ratio: float) -> bool:
    if mine <= 0:
        return False
    if theirs <= 0:
        return True
    return mine / theirs >= ratio


def analyze_theater_control(
    attacker: Force, defender: Force, rules: Ruleset | None = None
) -> TheaterAnalysis:
    rules = rules or Ruleset.default()
    config = rules.theater
    attacker_bonuses: list[TheaterBonus] = []
    defender_bonuses: list[TheaterBonus] = []

    attacker_space = count_units_in_theater(attacker, Theater.SPACE, rules)
    defender_space = count_units_in_theater(defender, Theater.SPACE, rules)
    if _dominates(attacker_space, defender_space, config.space_dominance_ratio):
        attacker_bonuses.append(
            TheaterBonus(
                theater=Theater.SPACE,
                name=SPACE_DOMINANCE,
                side=Side.ATTACKER,
                attack_mod=config.space_dominance_attack_bonus,
                defense_mod=0,
                requirement=f"{config.space_dominance_ratio:g}x enemy space units",
                special_effect=f"+{config.space_dominance_attack_bonus} attack to all rolls",
            )
        )

    if defender.stations > 0:
        defender_bonuses.append(
            TheaterBonus(
                theater=Theater.ORBITAL,
                name=ORBITAL_SHIELD,
                side=Side.DEFENDER,
                attack_mod=0,
                defense_mod=config.orbital_shield_defense_bonus,
                requirement="Defending stations present",
                special_effect=f"+{config.orbital_shield_defense_bonus} defense against all rolls",
            )
        )

    ground_superiority = _dominates(
        attacker.soldiers, defender.soldiers, config.ground_superiority_ratio
    )
    if ground_superiority:
        attacker_bonuses.append(
            TheaterBonus(
                theater=Theater.GROUND,
                name=GROUND_SUPERIORITY,
                side=Side.ATTACKER,
                attack_mod=0,
                defense_mod=0,
                requirement=f"{config.ground_superiority_ratio:g}x enemy soldiers",
                special_effect="Captures minimum territory even after losing the battle 1-2",
            )
        )

    analysis = TheaterAnalysis(
        attacker_bonuses=tuple(attacker_bonuses),
        defender_bonuses=tuple(defender_bonuses),
        attacker_attack_mod=sum(bonus.attack_mod for bonus in attacker_bonuses),
        defender_defense_mod=sum(bonus.defense_mod for bonus in defender_bonuses),
        attacker_has_ground_superiority=ground_superiority,
    )
    logger.debug(
        "theater: attacker=%s defender=%s",
        [bonus.name for bonus in analysis.attacker_bonuses],
        [bonus.name for bonus in analysis.defender_bonuses],
    )
    return analysis


def theater_bonus_display(analysis: TheaterAnalysis, side: Side) -> list[str]:
    bonuses = analysis.attacker_bonuses if side is Side.ATTACKER else analysis.defender_bonuses
    if not bonuses:
        return ["No theater bonuses"]
    return [f"{bonus.name}: {bonus.special_effect}" for bonus in bonuses]
