"""Coalition raid records."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AttackRecord:
    """One attack resolved this turn, as stored by the turn processor."""

    attacker_id: str
    attacker_name: str
    defender_id: str
    defender_name: str
    damage: float
    turn: int
    troops_committed: int = 0


@dataclass(frozen=True)
class BossStatus:
    empire_id: str
    is_boss: bool


@dataclass(frozen=True)
class CoalitionRaid:
    target_id: str
    target_name: str
    attacker_ids: tuple[str, ...]
    attacker_names: tuple[str, ...]
    is_valid: bool
    bonus_percentage: float
    turn: int

    @property
    def participant_count(self) -> int:
        return len(self.attacker_ids)


@dataclass(frozen=True)
class RaidParticipant:
    empire_id: str
    empire_name: str
    damage_dealt: float
    troops_committed: int
    damage_share: float


@dataclass(frozen=True)
class RaidDistribution:
    empire_id: str
    empire_name: str
    sectors_awarded: int
    damage_share: float
    elimination_credit: float


@dataclass(frozen=True)
class RaidRewards:
    elimination_credit: float
    reputation_bonus: int
    production_bonus: float
    production_bonus_turns: int
    morale_bonus: float
    morale_bonus_turns: int


@dataclass(frozen=True)
class RaidValidation:
    valid: bool
    errors: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RaidResult:
    raid: CoalitionRaid
    participants: tuple[RaidParticipant, ...]
    distributions: tuple[RaidDistribution, ...]
    total_sectors_distributed: int
    boss_eliminated: bool
    rewards: RaidRewards
    message: str
