"""Volley battle runtime models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from dominion_combat.domain.events import CombatFactor
from dominion_combat.domain.types import NO_CASUALTIES, CombatStance, Force, Side, Theater, UnitType


class VolleyWinner(str, Enum):
    ATTACKER = "attacker"
    DEFENDER = "defender"
    TIE = "tie"


class BattleOutcome(str, Enum):
    ATTACKER_DECISIVE = "attacker_decisive"
    ATTACKER_VICTORY = "attacker_victory"
    DEFENDER_VICTORY = "defender_victory"
    DEFENDER_DECISIVE = "defender_decisive"
    ATTACKER_RETREAT = "attacker_retreat"
    DEFENDER_RETREAT = "defender_retreat"

    @property
    def attacker_won(self) -> bool:
        return self in (
            BattleOutcome.ATTACKER_DECISIVE,
            BattleOutcome.ATTACKER_VICTORY,
            BattleOutcome.DEFENDER_RETREAT,
        )


@dataclass(frozen=True)
class TheaterBonus:
    theater: Theater
    name: str
    side: Side
    attack_mod: int
    defense_mod: int
    requirement: str
    special_effect: str = ""


@dataclass(frozen=True)
class TheaterAnalysis:
    attacker_bonuses: tuple[TheaterBonus, ...]
    defender_bonuses: tuple[TheaterBonus, ...]
    attacker_attack_mod: int
    defender_defense_mod: int
    attacker_has_ground_superiority: bool


@dataclass(frozen=True)
class AttackRoll:
    unit: UnitType
    roll: int
    modifier: int
    total: int
    threshold: int
    hit: bool
    critical: bool
    fumble: bool
    damage: int


@dataclass(frozen=True)
class VolleyResult:
    volley_number: int
    attacker_rolls: tuple[AttackRoll, ...]
    defender_rolls: tuple[AttackRoll, ...]
    attacker_hits: int
    defender_hits: int
    attacker_damage: int
    defender_damage: int
    winner: VolleyWinner
    attacker_casualties: Force
    defender_casualties: Force
    can_retreat: bool
    attacker_start: Force
    defender_start: Force

    @property
    def attacker_end(self) -> Force:
        return self.attacker_start.minus(self.attacker_casualties)

    @property
    def defender_end(self) -> Force:
        return self.defender_start.minus(self.defender_casualties)

    @property
    def round_winner(self) -> Side:
        """The side credited with the round. A true tie goes to the defender."""
        if self.winner is VolleyWinner.ATTACKER:
            return Side.ATTACKER
        return Side.DEFENDER

    def rolls_for(self, side: Side) -> tuple[AttackRoll, ...]:
        return self.attacker_rolls if side is Side.ATTACKER else self.defender_rolls


@dataclass(frozen=True)
class VolleyScore:
    attacker: int = 0
    defender: int = 0

    def record(self, side: Side) -> "VolleyScore":
        if side is Side.ATTACKER:
            return VolleyScore(self.attacker + 1, self.defender)
        return VolleyScore(self.attacker, self.defender + 1)

    def total(self) -> int:
        return self.attacker + self.defender

    def leader(self, wins_needed: int) -> Side | None:
        if self.attacker >= wins_needed:
            return Side.ATTACKER
        if self.defender >= wins_needed:
            return Side.DEFENDER
        return None


@dataclass(frozen=True)
class RetreatOrder:
    """Withdraw ``side`` once volley ``after_volley`` is resolved."""

    side: Side
    after_volley: int

    def __post_init__(self) -> None:
        if self.after_volley not in (1, 2):
            raise ValueError("retreat is only possible after volley 1 or 2")


@dataclass(frozen=True)
class BattleOptions:
    defender_sector_count: int
    attacker_stance: CombatStance = CombatStance.BALANCED
    defender_stance: CombatStance = CombatStance.BALANCED
    roll_overrides: tuple[int, ...] = ()
    random_override: float | None = None
    seed: int | None = None
    retreat: RetreatOrder | None = None

    def __post_init__(self) -> None:
        if self.defender_sector_count < 0:
            raise ValueError("defender_sector_count must be non-negative")


@dataclass(frozen=True)
class BattleResult:
    volleys: tuple[VolleyResult, ...]
    score: VolleyScore
    outcome: BattleOutcome
    sectors_captured: int
    attacker_casualties: Force
    defender_casualties: Force
    theater: TheaterAnalysis
    retreated: bool = False
    retreating_side: Side | None = None
    retreat_penalty: Force = NO_CASUALTIES
    factors: tuple[CombatFactor, ...] = field(default_factory=tuple)

    @property
    def attacker_won(self) -> bool:
        return self.outcome.attacker_won
