"""Best-of-three battle orchestration."""

from __future__ import annotations

import logging
import math

from dominion_combat.domain.battle_models import (
    BattleOptions,
    BattleOutcome,
    BattleResult,
    TheaterAnalysis,
    VolleyResult,
    VolleyScore,
    VolleyWinner,
)
from dominion_combat.domain.events import CombatFactor
from dominion_combat.domain.types import NO_CASUALTIES, CombatStance, Force, Side
from dominion_combat.rules.ruleset import Ruleset
from dominion_combat.sim.rng import CombatDice, derive_seed
from dominion_combat.systems.retreat import process_retreat
from dominion_combat.systems.theater import analyze_theater_control
from dominion_combat.systems.volley import resolve_volley

logger = logging.getLogger(__name__)

OUTCOME_DISPLAY = {
    BattleOutcome.ATTACKER_DECISIVE: "Decisive Victory",
    BattleOutcome.ATTACKER_VICTORY: "Victory",
    BattleOutcome.DEFENDER_VICTORY: "Repelled",
    BattleOutcome.DEFENDER_DECISIVE: "Crushing Defense",
    BattleOutcome.ATTACKER_RETREAT: "Attacker Retreated",
    BattleOutcome.DEFENDER_RETREAT: "Defender Retreated",
}

VOLLEY_PHASES = {1: "Space Combat", 2: "Orbital Combat", 3: "Ground Combat"}

_WINNER_TEXT = {
    VolleyWinner.ATTACKER: "Attacker wins",
    VolleyWinner.DEFENDER: "Defender wins",
    VolleyWinner.TIE: "Draw",
}


def outcome_display(outcome: BattleOutcome) -> str:
    return OUTCOME_DISPLAY[outcome]


def volley_description(volley: VolleyResult) -> str:
    phase = VOLLEY_PHASES.get(volley.volley_number, f"Volley {volley.volley_number}")
    return (
        f"Volley {volley.volley_number}: {phase}. {_WINNER_TEXT[volley.winner]} "
        f"({volley.attacker_hits} vs {volley.defender_hits} hits)."
    )


def battle_summary(result: BattleResult) -> str:
    summary = (
        f"Battle resolved in {len(result.volleys)} volleys "
        f"({result.score.attacker}-{result.score.defender}). "
    )
    if result.retreated:
        return summary + "Forces retreated from battle."
    if result.attacker_won:
        return summary + f"Attacker captured {result.sectors_captured} sector(s)."
    return summary + "Defender successfully repelled the attack."


def clamp_capture(captured: int, defender_sector_count: int) -> int:
    """The defender always keeps at least one sector."""
    if captured >= defender_sector_count:
        return max(0, defender_sector_count - 1)
    return max(0, captured)


def calculate_sectors_captured(
    outcome: BattleOutcome, defender_sector_count: int, rules: Ruleset | None = None
) -> int:
    config = (rules or Ruleset.default()).capture
    if outcome is BattleOutcome.ATTACKER_DECISIVE:
        captured = max(
            config.min_sectors,
            math.floor(defender_sector_count * config.decisive_percent) + config.decisive_bonus_sectors,
        )
    elif outcome in (BattleOutcome.ATTACKER_VICTORY, BattleOutcome.DEFENDER_RETREAT):
        captured = max(config.min_sectors, math.floor(defender_sector_count * config.standard_percent))
    else:
        captured = 0
    return clamp_capture(captured, defender_sector_count)


def _outcome_from_score(score: VolleyScore, max_volleys: int) -> BattleOutcome:
    """Decisive only for a clean sweep of every volley; 2-0 and 2-1 are plain wins."""
    if score.attacker > score.defender:
        if score.attacker == max_volleys and score.defender == 0:
            return BattleOutcome.ATTACKER_DECISIVE
        return BattleOutcome.ATTACKER_VICTORY
    if score.defender == max_volleys and score.attacker == 0:
        return BattleOutcome.DEFENDER_DECISIVE
    return BattleOutcome.DEFENDER_VICTORY


def _build_factors(
    options: BattleOptions,
    theater: TheaterAnalysis,
    *,
    ground_override: bool,
    crushing_extra: Force,
    retreat_penalty: Force,
    rules: Ruleset,
) -> tuple[CombatFactor, ...]:
    factors: list[CombatFactor] = []
    for bonus in theater.attacker_bonuses + theater.defender_bonuses:
        if bonus.attack_mod:
            delta = f"+{bonus.attack_mod} attack"
        elif bonus.defense_mod:
            delta = f"+{bonus.defense_mod} defense"
        else:
            delta = "special"
        factors.append(
            CombatFactor(
                name=bonus.name,
                value=float(bonus.attack_mod or bonus.defense_mod),
                delta=delta,
                why=f"{bonus.side.value}: {bonus.requirement}",
            )
        )
    for side, stance in ((Side.ATTACKER, options.attacker_stance), (Side.DEFENDER, options.defender_stance)):
        if stance is CombatStance.BALANCED:
            continue
        mods = rules.stance(stance)
        factors.append(
            CombatFactor(
                name=f"{side.value.title()} stance",
                value=mods.casualty_multiplier,
                delta=f"{mods.attack_mod:+d} attack / {mods.defense_mod:+d} defense",
                why=f"{stance.value} posture",
            )
        )
    if ground_override:
        factors.append(
            CombatFactor(
                name="Ground superiority override",
                value=float(rules.capture.min_sectors),
                delta=f"+{rules.capture.min_sectors} sector",
                why="Attacker lost 1-2 but held the ground",
            )
        )
    if not crushing_extra.is_empty():
        factors.append(
            CombatFactor(
                name="Crushing defeat",
                value=rules.capture.crushing_defeat_multiplier,
                delta=f"x{rules.capture.crushing_defeat_multiplier:g} attacker casualties",
                why="Attacker won no volleys",
            )
        )
    if not retreat_penalty.is_empty():
        factors.append(
            CombatFactor(
                name="Attack of opportunity",
                value=float(retreat_penalty.total()),
                delta=f"-{retreat_penalty.total()} units",
                why="Retreating force was pursued",
            )
        )
    return tuple(factors)


def resolve_battle(
    attacker: Force,
    defender: Force,
    options: BattleOptions,
    rules: Ruleset | None = None,
) -> BattleResult:
    """Run up to three volleys and settle the outcome.

    The caller's forces are never modified; each volley works on the survivors
    of the previous one. Identical inputs and injected randomness give equal
    results.
    """
    rules = rules or Ruleset.default()
    wins_needed = rules.volley.wins_to_decide
    if options.defender_sector_count == 0:
        logger.warning("Battle against a defender with no sectors; nothing can be captured")

    theater = analyze_theater_control(attacker, defender, rules)
    dice = CombatDice.create(
        seed=options.seed,
        roll_overrides=options.roll_overrides,
        random_override=options.random_override,
        sides=rules.volley.die_sides,
    )

    attacker_remaining = attacker
    defender_remaining = defender
    attacker_losses = NO_CASUALTIES
    defender_losses = NO_CASUALTIES
    score = VolleyScore()
    volleys: list[VolleyResult] = []
    retreating_side: Side | None = None

    for number in range(1, rules.volley.max_volleys + 1):
        volley = resolve_volley(
            attacker_remaining,
            defender_remaining,
            attacker_stance=options.attacker_stance,
            defender_stance=options.defender_stance,
            theater=theater,
            volley_number=number,
            dice=dice,
            rules=rules,
        )
        volleys.append(volley)
        attacker_losses = attacker_losses.plus(volley.attacker_casualties)
        defender_losses = defender_losses.plus(volley.defender_casualties)
        attacker_remaining = volley.attacker_end
        defender_remaining = volley.defender_end
        score = score.record(volley.round_winner)

        if score.leader(wins_needed) is not None:
            break
        order = options.retreat
        if order is not None and order.after_volley == number and volley.can_retreat:
            retreating_side = order.side
            break

    retreat_penalty = NO_CASUALTIES
    crushing_extra = NO_CASUALTIES
    ground_override = False

    if retreating_side is not None:
        if retreating_side is Side.ATTACKER:
            merged = process_retreat(attacker, attacker_losses, rules)
            retreat_penalty = merged.minus(attacker_losses)
            attacker_losses = merged
            outcome = BattleOutcome.ATTACKER_RETREAT
        else:
            merged = process_retreat(defender, defender_losses, rules)
            retreat_penalty = merged.minus(defender_losses)
            defender_losses = merged
            outcome = BattleOutcome.DEFENDER_RETREAT
        sectors = calculate_sectors_captured(outcome, options.defender_sector_count, rules)
    else:
        outcome = _outcome_from_score(score, rules.volley.max_volleys)
        sectors = calculate_sectors_captured(outcome, options.defender_sector_count, rules)
        narrow_loss = outcome is BattleOutcome.DEFENDER_VICTORY and score.attacker > 0
        if narrow_loss and theater.attacker_has_ground_superiority:
            ground_override = True
            outcome = BattleOutcome.ATTACKER_VICTORY
            sectors = clamp_capture(rules.capture.min_sectors, options.defender_sector_count)
        elif outcome is BattleOutcome.DEFENDER_DECISIVE:
            penalized = attacker_losses.scaled_floor(rules.capture.crushing_defeat_multiplier - 1.0)
            capped = attacker_losses.plus(penalized).capped_by(attacker)
            crushing_extra = capped.minus(attacker_losses)
            attacker_losses = capped

    result = BattleResult(
        volleys=tuple(volleys),
        score=score,
        outcome=outcome,
        sectors_captured=sectors,
        attacker_casualties=attacker_losses,
        defender_casualties=defender_losses,
        theater=theater,
        retreated=retreating_side is not None,
        retreating_side=retreating_side,
        retreat_penalty=retreat_penalty,
        factors=_build_factors(
            options,
            theater,
            ground_override=ground_override,
            crushing_extra=crushing_extra,
            retreat_penalty=retreat_penalty,
            rules=rules,
        ),
    )
    logger.debug(
        "battle: %s score %d-%d captured=%d",
        outcome.value,
        score.attacker,
        score.defender,
        sectors,
    )
    return result


def estimate_win_probability(
    attacker: Force,
    defender: Force,
    *,
    attacker_stance: CombatStance = CombatStance.BALANCED,
    defender_stance: CombatStance = CombatStance.BALANCED,
    iterations: int = 100,
    seed: int | None = None,
    rules: Ruleset | None = None,
) -> float:
    """Share of simulated battles the attacker wins (retreat-free)."""
    if iterations <= 0:
        raise ValueError("iterations must be positive")
    rules = rules or Ruleset.default()
    wins = 0
    for index in range(iterations):
        battle_seed = None
        if seed is not None:
            battle_seed = derive_seed(seed, turn=0, engagement=index, stream="estimate", purpose="battle")
        result = resolve_battle(
            attacker,
            defender,
            BattleOptions(
                defender_sector_count=10,
                attacker_stance=attacker_stance,
                defender_stance=defender_stance,
                seed=battle_seed,
            ),
            rules,
        )
        if result.outcome in (BattleOutcome.ATTACKER_DECISIVE, BattleOutcome.ATTACKER_VICTORY):
            wins += 1
    return wins / iterations
