"""Named combat resolution strategies.

``volley`` is the canonical best-of-three d20 system. ``unified`` is the older
single-roll power comparison, kept for balance comparisons and migration.
Both report through the same :class:`Engagement` summary.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Protocol, Union

from dominion_combat.domain.battle_models import BattleOptions, BattleResult
from dominion_combat.domain.types import CombatOutcome, Force, UnitType
from dominion_combat.rules.ruleset import Ruleset
from dominion_combat.sim.rng import CombatDice
from dominion_combat.systems.battle import clamp_capture, resolve_battle
from dominion_combat.systems.casualties import calculate_loss_rate, calculate_variance, force_casualties
from dominion_combat.systems.effectiveness import calculate_combat_modifier
from dominion_combat.systems.power import apply_underdog_bonuses, calculate_punchup_bonus, calculate_unified_power

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngagementContext:
    options: BattleOptions
    attacker_effectiveness: float = 100.0
    defender_effectiveness: float = 100.0
    attacker_networth: float = 0.0
    defender_networth: float = 0.0
    coalition_multiplier: float = 1.0


@dataclass(frozen=True)
class UnifiedReport:
    attacker_power: float
    defender_power: float
    attacker_win_chance: float
    roll: float
    narrative: tuple[str, ...]
    summary: str
    punchup_sectors: int = 0


@dataclass(frozen=True)
class Engagement:
    strategy: str
    attacker_outcome: CombatOutcome
    sectors_captured: int
    attacker_casualties: Force
    defender_casualties: Force
    detail: Union[BattleResult, UnifiedReport]

    @property
    def defender_outcome(self) -> CombatOutcome:
        return self.attacker_outcome.inverted()


class CombatStrategy(Protocol):
    name: str

    def resolve(
        self, attacker: Force, defender: Force, context: EngagementContext, rules: Ruleset
    ) -> Engagement:
        ...


class VolleyStrategy:
    name = "volley"

    def resolve(
        self, attacker: Force, defender: Force, context: EngagementContext, rules: Ruleset
    ) -> Engagement:
        result = resolve_battle(attacker, defender, context.options, rules)
        sectors = result.sectors_captured
        if result.attacker_won:
            extra = calculate_punchup_bonus(
                context.attacker_networth, context.defender_networth, True, rules
            )
            sectors = clamp_capture(sectors + extra, context.options.defender_sector_count)
        return Engagement(
            strategy=self.name,
            attacker_outcome=CombatOutcome.VICTORY if result.attacker_won else CombatOutcome.DEFEAT,
            sectors_captured=sectors,
            attacker_casualties=result.attacker_casualties,
            defender_casualties=result.defender_casualties,
            detail=result,
        )


def determine_unified_winner(
    attacker_power: float, defender_power: float, roll: float, rules: Ruleset | None = None
) -> tuple[CombatOutcome, float]:
    """Attacker's outcome and win chance for one roll in [0, 1)."""
    config = (rules or Ruleset.default()).unified
    if attacker_power <= 0 and defender_power <= 0:
        return CombatOutcome.DRAW, 0.5
    if attacker_power <= 0:
        return CombatOutcome.DEFEAT, 0.0
    if defender_power <= 0:
        return CombatOutcome.VICTORY, 1.0

    ratio = attacker_power / defender_power
    chance = min(config.max_win_chance, max(config.min_win_chance, ratio / (ratio + 1)))
    if 0.5 - config.draw_band <= chance <= 0.5 + config.draw_band:
        if 0.5 - config.draw_roll_window < roll < 0.5 + config.draw_roll_window:
            return CombatOutcome.DRAW, chance
    if roll < chance:
        return CombatOutcome.VICTORY, chance
    return CombatOutcome.DEFEAT, chance


def _outcome_multiplier(outcome: CombatOutcome, rules: Ruleset) -> float:
    config = rules.unified
    if outcome is CombatOutcome.VICTORY:
        return config.winner_casualty_multiplier
    if outcome is CombatOutcome.DEFEAT:
        return config.loser_casualty_multiplier
    return config.draw_casualty_multiplier


def _narrative(outcome: CombatOutcome) -> tuple[str, ...]:
    if outcome is CombatOutcome.VICTORY:
        return (
            "Space Combat: Attackers seize space superiority!",
            "Orbital Combat: Orbital defenses neutralized!",
            "Ground Combat: Landing forces secure the territory!",
        )
    if outcome is CombatOutcome.DEFEAT:
        return (
            "Space Combat: Defenders repel the space assault!",
            "Orbital Combat: Orbital stations hold the line!",
            "Ground Combat: Ground forces repel the invasion!",
        )
    return (
        "Space Combat: Space combat ends in stalemate.",
        "Orbital Combat: Neither side gains orbital advantage.",
        "Ground Combat: Ground combat ends in a bloody draw.",
    )


def _summary(outcome: CombatOutcome, sectors: int, chance: float) -> str:
    chance_text = f"({chance * 100:.1f}% win chance)"
    if outcome is CombatOutcome.VICTORY:
        plural = "" if sectors == 1 else "s"
        return f"Invasion successful! {sectors} sector{plural} captured. {chance_text}"
    if outcome is CombatOutcome.DEFEAT:
        return f"Invasion repelled! Defender holds their territory. {chance_text}"
    return f"Combat ended in stalemate. No territory changed hands. {chance_text}"


class UnifiedStrategy:
    name = "unified"

    def resolve(
        self, attacker: Force, defender: Force, context: EngagementContext, rules: Ruleset
    ) -> Engagement:
        options = context.options
        config = rules.unified
        dice = CombatDice.create(seed=options.seed, random_override=options.random_override)

        # Soldiers only fight if carriers can lift them.
        lift = attacker.carriers * config.soldiers_per_carrier
        committed = attacker.with_count(UnitType.SOLDIERS, min(attacker.soldiers, lift))

        attacker_power = (
            calculate_unified_power(committed, False, rules)
            * calculate_combat_modifier(context.attacker_effectiveness)
            * context.coalition_multiplier
        )
        defender_power = calculate_unified_power(defender, True, rules) * calculate_combat_modifier(
            context.defender_effectiveness
        )
        attacker_power = apply_underdog_bonuses(
            attacker_power,
            defender_power,
            attacker_networth=context.attacker_networth,
            defender_networth=context.defender_networth,
            rules=rules,
        )

        roll = dice.random()
        outcome, chance = determine_unified_winner(attacker_power, defender_power, roll, rules)

        variance = calculate_variance(dice.random(), rules)
        attacker_rate = calculate_loss_rate(attacker_power, defender_power, rules)
        defender_rate = calculate_loss_rate(defender_power, attacker_power, rules)
        attacker_casualties = force_casualties(
            committed,
            attacker_rate * _outcome_multiplier(outcome, rules),
            variance,
            exempt=(UnitType.STATIONS,),
        )
        defender_casualties = force_casualties(
            defender, defender_rate * _outcome_multiplier(outcome.inverted(), rules), variance
        )

        sectors = 0
        punchup = 0
        if outcome is CombatOutcome.VICTORY:
            spread = config.capture_max_percent - config.capture_min_percent
            capture_percent = config.capture_min_percent + dice.random() * spread
            punchup = calculate_punchup_bonus(
                context.attacker_networth, context.defender_networth, True, rules
            )
            sectors = max(rules.capture.min_sectors, math.floor(options.defender_sector_count * capture_percent))
            sectors = clamp_capture(sectors + punchup, options.defender_sector_count)

        logger.debug("unified: %s chance=%.3f roll=%.3f", outcome.value, chance, roll)
        return Engagement(
            strategy=self.name,
            attacker_outcome=outcome,
            sectors_captured=sectors,
            attacker_casualties=attacker_casualties,
            defender_casualties=defender_casualties,
            detail=UnifiedReport(
                attacker_power=attacker_power,
                defender_power=defender_power,
                attacker_win_chance=chance,
                roll=roll,
                narrative=_narrative(outcome),
                summary=_summary(outcome, sectors, chance),
                punchup_sectors=punchup,
            ),
        )


STRATEGIES: dict[str, CombatStrategy] = {
    VolleyStrategy.name: VolleyStrategy(),
    UnifiedStrategy.name: UnifiedStrategy(),
}


def get_strategy(name: str = VolleyStrategy.name) -> CombatStrategy:
    try:
        return STRATEGIES[name]
    except KeyError:
        valid = ", ".join(sorted(STRATEGIES))
        raise ValueError(f"Unknown combat strategy {name!r}; expected one of: {valid}") from None


def resolve_engagement(
    attacker: Force,
    defender: Force,
    context: EngagementContext,
    *,
    strategy: str = VolleyStrategy.name,
    rules: Ruleset | None = None,
) -> Engagement:
    return get_strategy(strategy).resolve(attacker, defender, context, rules or Ruleset.default())
