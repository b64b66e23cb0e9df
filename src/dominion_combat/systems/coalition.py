"""Coalition raids: three or more empires striking the same boss in one turn.

Detection works on the turn's recorded attacks. Once the raid's captured
territory is known it is shared out by damage dealt, with every participant
guaranteed a sector while sectors last.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from dominion_combat.domain.raid_models import (
    AttackRecord,
    BossStatus,
    CoalitionRaid,
    RaidDistribution,
    RaidParticipant,
    RaidResult,
    RaidRewards,
    RaidValidation,
)
from dominion_combat.rules.ruleset import Ruleset

logger = logging.getLogger(__name__)


def calculate_coalition_bonus(attacker_count: int, rules: Ruleset | None = None) -> float:
    config = (rules or Ruleset.default()).coalition
    if attacker_count < config.min_attackers:
        return 0.0
    return min((attacker_count - 2) * config.bonus_per_extra_attacker, config.max_bonus)


def detect_coalition_raid(
    attacks: Iterable[AttackRecord],
    boss_statuses: Iterable[BossStatus],
    current_turn: int,
    rules: Ruleset | None = None,
) -> CoalitionRaid | None:
    """The first boss target hit by enough distinct attackers this turn, if any."""
    config = (rules or Ruleset.default()).coalition
    bosses = {status.empire_id for status in boss_statuses if status.is_boss}

    by_target: dict[str, list[AttackRecord]] = {}
    for attack in attacks:
        if attack.turn != current_turn:
            continue
        by_target.setdefault(attack.defender_id, []).append(attack)

    for target_id, target_attacks in by_target.items():
        if target_id not in bosses:
            continue
        strongest: dict[str, AttackRecord] = {}
        for attack in target_attacks:
            existing = strongest.get(attack.attacker_id)
            if existing is None or attack.damage > existing.damage:
                strongest[attack.attacker_id] = attack
        if len(strongest) < config.min_attackers:
            continue

        target_name = target_attacks[0].defender_name
        if not target_name:
            logger.warning("Coalition raid target %s has no name", target_id)
            target_name = "Unknown"
        raid = CoalitionRaid(
            target_id=target_id,
            target_name=target_name,
            attacker_ids=tuple(strongest),
            attacker_names=tuple(attack.attacker_name for attack in strongest.values()),
            is_valid=True,
            bonus_percentage=calculate_coalition_bonus(len(strongest), rules),
            turn=current_turn,
        )
        logger.debug(
            "coalition raid on %s by %d empires (+%.0f%%)",
            target_id,
            raid.participant_count,
            raid.bonus_percentage * 100,
        )
        return raid
    return None


def is_part_of_coalition_raid(attacker_id: str, raid: CoalitionRaid | None) -> bool:
    if raid is None or not raid.is_valid:
        return False
    return attacker_id in raid.attacker_ids


def calculate_raid_combat_bonus(raid: CoalitionRaid | None, attacker_id: str) -> float:
    """Power multiplier for ``attacker_id``: ``1 + bonus`` for participants, else 1.0."""
    if raid is None or not is_part_of_coalition_raid(attacker_id, raid):
        return 1.0
    return 1.0 + raid.bonus_percentage


def raid_bonus_description(raid: CoalitionRaid) -> str:
    bonus = round(raid.bonus_percentage * 100)
    return (
        f"Coalition Raid: {raid.participant_count} empires coordinating attack. "
        f"+{bonus}% combat bonus to all participants."
    )


def _raid_attacks(raid: CoalitionRaid, attacks: Iterable[AttackRecord]) -> list[AttackRecord]:
    members = set(raid.attacker_ids)
    return [
        attack
        for attack in attacks
        if attack.attacker_id in members
        and attack.defender_id == raid.target_id
        and attack.turn == raid.turn
    ]


def _damage_by_attacker(raid: CoalitionRaid, attacks: Iterable[AttackRecord]) -> dict[str, float]:
    totals: dict[str, float] = {}
    for attack in _raid_attacks(raid, attacks):
        totals[attack.attacker_id] = totals.get(attack.attacker_id, 0.0) + attack.damage
    return totals


def calculate_raid_distribution(
    raid: CoalitionRaid,
    attacks: Sequence[AttackRecord],
    total_captured: int,
) -> list[RaidDistribution]:
    """Share captured sectors among raid participants.

    Everyone gets one sector first, in raid order, while sectors last. The rest
    go one at a time to whoever is furthest below their damage share; ties go
    to the earlier participant.
    """
    if not raid.is_valid or total_captured <= 0 or raid.participant_count == 0:
        return []

    count = raid.participant_count
    credit = 1 / count
    damage = _damage_by_attacker(raid, attacks)
    total_damage = sum(damage.values())

    if total_damage <= 0:
        each, remainder = divmod(total_captured, count)
        return [
            RaidDistribution(
                empire_id=empire_id,
                empire_name=raid.attacker_names[index],
                sectors_awarded=each + (1 if index < remainder else 0),
                damage_share=credit,
                elimination_credit=credit,
            )
            for index, empire_id in enumerate(raid.attacker_ids)
        ]

    shares = [damage.get(empire_id, 0.0) / total_damage for empire_id in raid.attacker_ids]
    floor_count = min(count, total_captured)
    awarded = [1 if index < floor_count else 0 for index in range(count)]
    remaining = total_captured - floor_count

    while remaining > 0:
        best_index = 0
        best_deficit = float("-inf")
        for index, share in enumerate(shares):
            deficit = total_captured * share - awarded[index]
            if deficit > best_deficit:
                best_deficit = deficit
                best_index = index
        awarded[best_index] += 1
        remaining -= 1

    return [
        RaidDistribution(
            empire_id=empire_id,
            empire_name=raid.attacker_names[index],
            sectors_awarded=awarded[index],
            damage_share=shares[index],
            elimination_credit=credit,
        )
        for index, empire_id in enumerate(raid.attacker_ids)
    ]


def get_raid_participants(raid: CoalitionRaid, attacks: Sequence[AttackRecord]) -> list[RaidParticipant]:
    """Participants with summed damage and troops, highest damage first."""
    totals: dict[str, list] = {}
    for attack in _raid_attacks(raid, attacks):
        entry = totals.setdefault(attack.attacker_id, [attack.attacker_name, 0.0, 0])
        entry[1] += attack.damage
        entry[2] += attack.troops_committed

    total_damage = sum(entry[1] for entry in totals.values())
    participants = [
        RaidParticipant(
            empire_id=empire_id,
            empire_name=name,
            damage_dealt=damage,
            troops_committed=troops,
            damage_share=damage / total_damage if total_damage > 0 else 0.0,
        )
        for empire_id, (name, damage, troops) in totals.items()
    ]
    participants.sort(key=lambda participant: participant.damage_dealt, reverse=True)
    return participants


def calculate_raid_rewards(participant_count: int, rules: Ruleset | None = None) -> RaidRewards:
    if participant_count <= 0:
        raise ValueError("participant_count must be positive")
    config = (rules or Ruleset.default()).coalition
    return RaidRewards(
        elimination_credit=1 / participant_count,
        reputation_bonus=config.reputation_bonus,
        production_bonus=config.production_bonus,
        production_bonus_turns=config.production_bonus_turns,
        morale_bonus=config.morale_bonus,
        morale_bonus_turns=config.morale_bonus_turns,
    )


def raid_victory_message(raid: CoalitionRaid, distributions: Sequence[RaidDistribution]) -> str:
    names = ", ".join(raid.attacker_names[:3])
    others = len(raid.attacker_names) - 3
    if others > 0:
        names = f"{names}, and {others} others"
    total = sum(item.sectors_awarded for item in distributions)
    return (
        f"Coalition Victory! {raid.participant_count} empires ({names}) have successfully "
        f"defeated the dominant power {raid.target_name}. "
        f"{total} sectors have been distributed among the victors."
    )


def validate_raid_attacks(attacks: Sequence[AttackRecord]) -> RaidValidation:
    """Check a batch of attacks. Never raises; problems come back as messages."""
    errors: list[str] = []
    if not attacks:
        errors.append("No attacks provided")
    for attack in attacks:
        if not attack.attacker_id:
            errors.append("Missing attacker ID for attack")
        if not attack.defender_id:
            errors.append(f"Missing defender ID for attack by {attack.attacker_name}")
        if attack.damage < 0:
            errors.append(f"Negative damage for attack by {attack.attacker_name}")
    return RaidValidation(valid=not errors, errors=tuple(errors))


def resolve_raid_outcome(
    raid: CoalitionRaid,
    attacks: Sequence[AttackRecord],
    total_captured: int,
    *,
    boss_eliminated: bool = False,
    rules: Ruleset | None = None,
) -> RaidResult:
    distributions = calculate_raid_distribution(raid, attacks, total_captured)
    return RaidResult(
        raid=raid,
        participants=tuple(get_raid_participants(raid, attacks)),
        distributions=tuple(distributions),
        total_sectors_distributed=sum(item.sectors_awarded for item in distributions),
        boss_eliminated=boss_eliminated,
        rewards=calculate_raid_rewards(raid.participant_count, rules),
        message=raid_victory_message(raid, distributions),
    )
