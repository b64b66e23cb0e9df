from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from dominion_combat.domain.battle_models import BattleOptions, BattleOutcome
from dominion_combat.systems.battle import resolve_battle
from tests.helpers.invariants import assert_battle_bounds
from tests.helpers.strategies import force_strategy, roll_strategy, stance_strategy


@given(
    attacker=force_strategy(),
    defender=force_strategy(),
    attacker_stance=stance_strategy(),
    defender_stance=stance_strategy(),
    sectors=st.integers(min_value=0, max_value=200),
    seed=st.integers(min_value=0, max_value=2**32),
)
@settings(max_examples=60, deadline=None)
def test_battle_stays_within_bounds(attacker, defender, attacker_stance, defender_stance, sectors, seed) -> None:
    options = BattleOptions(
        defender_sector_count=sectors,
        attacker_stance=attacker_stance,
        defender_stance=defender_stance,
        seed=seed,
    )
    result = resolve_battle(attacker, defender, options)
    assert_battle_bounds(result, attacker, defender, sectors)
    assert 2 <= result.score.total <= 3
    assert len(result.volleys) == result.score.total
    assert max(result.score.attacker, result.score.defender) == 2
    assert result.outcome not in (BattleOutcome.ATTACKER_DECISIVE, BattleOutcome.DEFENDER_DECISIVE)
    for earlier, later in zip(result.volleys, result.volleys[1:]):
        assert later.attacker_start == earlier.attacker_end
        assert later.defender_start == earlier.defender_end


@given(
    attacker=force_strategy(),
    defender=force_strategy(),
    rolls=roll_strategy(),
    sectors=st.integers(min_value=1, max_value=200),
)
@settings(max_examples=40, deadline=None)
def test_scripted_rolls_stay_within_bounds(attacker, defender, rolls, sectors) -> None:
    result = resolve_battle(
        attacker,
        defender,
        BattleOptions(defender_sector_count=sectors, roll_overrides=rolls, seed=0),
    )
    assert_battle_bounds(result, attacker, defender, sectors)
    for volley in result.volleys:
        for roll in volley.attacker_rolls + volley.defender_rolls:
            assert 1 <= roll.roll <= 20
            if roll.fumble:
                assert not roll.hit
            if roll.critical:
                assert roll.hit
