from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from dominion_combat.domain.raid_models import CoalitionRaid
from dominion_combat.systems.coalition import calculate_coalition_bonus, calculate_raid_distribution
from tests.helpers.invariants import total_awarded
from tests.helpers.strategies import raid_attacks_strategy


def _raid_for(attacks) -> CoalitionRaid:
    return CoalitionRaid(
        target_id="boss",
        target_name="Dominator",
        attacker_ids=tuple(attack.attacker_id for attack in attacks),
        attacker_names=tuple(attack.attacker_name for attack in attacks),
        is_valid=True,
        bonus_percentage=calculate_coalition_bonus(len(attacks)),
        turn=7,
    )


@given(attacks=raid_attacks_strategy(), captured=st.integers(min_value=0, max_value=120))
@settings(max_examples=50)
def test_distribution_hands_out_exactly_the_capture(attacks, captured: int) -> None:
    raid = _raid_for(attacks)
    distributions = calculate_raid_distribution(raid, attacks, captured)
    assert total_awarded(distributions) == captured
    if captured >= raid.participant_count:
        assert all(item.sectors_awarded >= 1 for item in distributions)


@given(count=st.integers(min_value=0, max_value=50))
@settings(max_examples=30)
def test_coalition_bonus_is_capped(count: int) -> None:
    assert 0.0 <= calculate_coalition_bonus(count) <= 0.25
