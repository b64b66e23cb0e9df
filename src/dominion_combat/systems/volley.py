"""One round of d20 combat between two forces."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from dominion_combat.domain.battle_models import AttackRoll, TheaterAnalysis, VolleyResult, VolleyWinner
from dominion_combat.domain.types import NO_CASUALTIES, CombatStance, Force, Side, UnitType
from dominion_combat.rules.ruleset import Ruleset, UnitCombatProfile
from dominion_combat.sim.rng import CombatDice

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VolleySummary:
    total_rolls: int
    hits: int
    criticals: int
    fumbles: int
    total_damage: int


def hull_points(count: int, profile: UnitCombatProfile) -> int:
    if count <= 0:
        return 0
    return math.ceil(count / profile.hull_per) * profile.hull


def total_hull(force: Force, rules: Ruleset) -> int:
    return sum(hull_points(count, rules.profile(unit)) for unit, count in force.items() if count > 0)


def stack_damage(count: int, profile: UnitCombatProfile) -> int:
    """Damage a stack deals on a normal hit: half its hull points, rounded up."""
    return math.ceil(hull_points(count, profile) / 2)


def roll_attack(
    unit: UnitType,
    count: int,
    *,
    modifier: int,
    threshold: int,
    dice: CombatDice,
    rules: Ruleset,
) -> AttackRoll:
    config = rules.volley
    roll = dice.roll(config.die_sides)
    fumble = roll == config.fumble_roll
    critical = roll == config.critical_roll
    total = roll + modifier
    hit = not fumble and (critical or total >= threshold)
    damage = 0
    if hit:
        damage = stack_damage(count, rules.profile(unit))
        if critical:
            damage *= config.critical_multiplier
    return AttackRoll(
        unit=unit,
        roll=roll,
        modifier=modifier,
        total=total,
        threshold=threshold,
        hit=hit,
        critical=critical,
        fumble=fumble,
        damage=damage,
    )


def rolling_units(force: Force, side: Side, rules: Ruleset) -> list[UnitType]:
    """Unit types that roll this volley. Defense-only units never roll when attacking."""
    units = force.present()
    if side is Side.ATTACKER:
        units = [unit for unit in units if unit not in rules.volley.defense_only_units]
    return units


def _side_rolls(
    force: Force,
    side: Side,
    *,
    attack_mod: int,
    opposing_defense_mod: int,
    dice: CombatDice,
    rules: Ruleset,
) -> tuple[AttackRoll, ...]:
    rolls: list[AttackRoll] = []
    for unit in rolling_units(force, side, rules):
        profile = rules.profile(unit)
        rolls.append(
            roll_attack(
                unit,
                force.count(unit),
                modifier=profile.attack_mod + attack_mod,
                threshold=profile.defense + opposing_defense_mod,
                dice=dice,
                rules=rules,
            )
        )
    return tuple(rolls)


def distribute_damage(
    force: Force, damage: int, stance: CombatStance, rules: Ruleset
) -> Force:
    """Convert incoming damage into unit losses, weighted by each stack's hull share."""
    if damage <= 0:
        return NO_CASUALTIES
    hull_total = total_hull(force, rules)
    if hull_total <= 0:
        return NO_CASUALTIES
    adjusted = damage * rules.stance(stance).casualty_multiplier
    losses: dict[str, int] = {}
    for unit, count in force.items():
        if count <= 0:
            continue
        profile = rules.profile(unit)
        unit_damage = math.floor(adjusted * hull_points(count, profile) / hull_total)
        lost = math.floor(unit_damage / profile.hull * profile.hull_per)
        losses[unit.value] = min(count, lost)
    return Force(**losses)


def _decide(attacker_hits: int, defender_hits: int, attacker_damage: int, defender_damage: int) -> VolleyWinner:
    if attacker_hits != defender_hits:
        return VolleyWinner.ATTACKER if attacker_hits > defender_hits else VolleyWinner.DEFENDER
    if attacker_damage != defender_damage:
        return VolleyWinner.ATTACKER if attacker_damage > defender_damage else VolleyWinner.DEFENDER
    return VolleyWinner.TIE


def resolve_volley(
    attacker: Force,
    defender: Force,
    *,
    attacker_stance: CombatStance,
    defender_stance: CombatStance,
    theater: TheaterAnalysis,
    volley_number: int,
    dice: CombatDice,
    rules: Ruleset | None = None,
) -> VolleyResult:
    """Resolve one volley. Attacker rolls are drawn before defender rolls."""
    rules = rules or Ruleset.default()
    attacker_mods = rules.stance(attacker_stance)
    defender_mods = rules.stance(defender_stance)

    attacker_rolls = _side_rolls(
        attacker,
        Side.ATTACKER,
        attack_mod=attacker_mods.attack_mod + theater.attacker_attack_mod,
        opposing_defense_mod=defender_mods.defense_mod + theater.defender_defense_mod,
        dice=dice,
        rules=rules,
    )
    defender_rolls = _side_rolls(
        defender,
        Side.DEFENDER,
        attack_mod=defender_mods.attack_mod,
        opposing_defense_mod=attacker_mods.defense_mod,
        dice=dice,
        rules=rules,
    )

    attacker_hits = sum(1 for roll in attacker_rolls if roll.hit)
    defender_hits = sum(1 for roll in defender_rolls if roll.hit)
    attacker_damage = sum(roll.damage for roll in attacker_rolls)
    defender_damage = sum(roll.damage for roll in defender_rolls)
    winner = _decide(attacker_hits, defender_hits, attacker_damage, defender_damage)

    result = VolleyResult(
        volley_number=volley_number,
        attacker_rolls=attacker_rolls,
        defender_rolls=defender_rolls,
        attacker_hits=attacker_hits,
        defender_hits=defender_hits,
        attacker_damage=attacker_damage,
        defender_damage=defender_damage,
        winner=winner,
        attacker_casualties=distribute_damage(attacker, defender_damage, attacker_stance, rules),
        defender_casualties=distribute_damage(defender, attacker_damage, defender_stance, rules),
        can_retreat=volley_number < rules.volley.max_volleys,
        attacker_start=attacker,
        defender_start=defender,
    )
    logger.debug(
        "volley %d: hits %d-%d damage %d-%d winner=%s",
        volley_number,
        attacker_hits,
        defender_hits,
        attacker_damage,
        defender_damage,
        winner.value,
    )
    return result


def summarize_volley(volley: VolleyResult, side: Side) -> VolleySummary:
    rolls = volley.rolls_for(side)
    return VolleySummary(
        total_rolls=len(rolls),
        hits=sum(1 for roll in rolls if roll.hit),
        criticals=sum(1 for roll in rolls if roll.critical),
        fumbles=sum(1 for roll in rolls if roll.fumble),
        total_damage=sum(roll.damage for roll in rolls),
    )
