from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from dominion_combat.domain.types import CombatOutcome
from dominion_combat.systems.casualties import calculate_combat_casualties, calculate_loss_rate, calculate_variance
from dominion_combat.systems.effectiveness import EffectivenessEvent, update_effectiveness
from dominion_combat.systems.retreat import attack_of_opportunity
from tests.helpers.invariants import assert_losses_within
from tests.helpers.strategies import force_strategy

powers = st.floats(min_value=0.0, max_value=1e6, allow_nan=False, allow_infinity=False)
unit_draws = st.floats(min_value=0.0, max_value=1.0, exclude_max=True)


@given(attack=powers, defense=powers)
@settings(max_examples=50)
def test_loss_rate_is_bounded(attack: float, defense: float) -> None:
    assert 0.15 <= calculate_loss_rate(attack, defense) <= 0.35


@given(draw=unit_draws)
@settings(max_examples=50)
def test_variance_is_bounded(draw: float) -> None:
    assert 0.8 <= calculate_variance(draw) <= 1.2


@given(units=st.integers(min_value=0, max_value=100_000), attack=powers, defense=powers, draw=unit_draws)
@settings(max_examples=50)
def test_casualties_never_exceed_units(units: int, attack: float, defense: float, draw: float) -> None:
    assert 0 <= calculate_combat_casualties(units, attack, defense, draw) <= units


@given(survivors=force_strategy())
@settings(max_examples=30)
def test_attack_of_opportunity_within_survivors(survivors) -> None:
    losses = attack_of_opportunity(survivors)
    assert_losses_within(losses, survivors)
    assert losses.stations == 0


events = st.one_of(
    st.tuples(st.just(EffectivenessEvent.COMBAT), st.sampled_from(list(CombatOutcome)), unit_draws),
    st.tuples(st.just(EffectivenessEvent.RECOVERY), st.none(), st.just(0.0)),
    st.tuples(st.just(EffectivenessEvent.MAINTENANCE_UNPAID), st.none(), st.just(0.0)),
)


@given(history=st.lists(events, max_size=40))
@settings(max_examples=30)
def test_effectiveness_stays_in_range(history) -> None:
    value = 85.0
    for event, outcome, draw in history:
        value = update_effectiveness(value, event, outcome=outcome, random_value=draw).current
        assert 0 <= value <= 100
