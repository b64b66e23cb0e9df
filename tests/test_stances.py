from __future__ import annotations

import pytest

from dominion_combat.domain.types import CombatStance
from dominion_combat.systems.stances import (
    all_stances,
    apply_casualty_modifier,
    default_stance,
    effective_attack_mod,
    effective_defense,
    is_valid_stance,
    parse_stance,
    stance_modifiers,
)


@pytest.mark.parametrize(
    ("stance", "attack", "defense", "casualties"),
    [
        (CombatStance.AGGRESSIVE, 3, -2, 1.2),
        (CombatStance.BALANCED, 0, 0, 1.0),
        (CombatStance.DEFENSIVE, -2, 3, 0.8),
        (CombatStance.EVASIVE, -3, 1, 0.6),
    ],
)
def test_canonical_stance_table(stance: CombatStance, attack: int, defense: int, casualties: float) -> None:
    mods = stance_modifiers(stance)
    assert mods.attack_mod == attack
    assert mods.defense_mod == defense
    assert mods.casualty_multiplier == pytest.approx(casualties)


def test_effective_values() -> None:
    assert effective_attack_mod(4, CombatStance.AGGRESSIVE) == 7
    assert effective_defense(15, CombatStance.DEFENSIVE) == 18
    assert apply_casualty_modifier(100, CombatStance.EVASIVE) == 60
    assert apply_casualty_modifier(100, CombatStance.BALANCED) == 100


def test_stance_validation() -> None:
    assert all(is_valid_stance(stance.value) for stance in CombatStance)
    assert not is_valid_stance("reckless")
    assert not is_valid_stance("")
    assert not is_valid_stance(3)
    assert parse_stance("evasive") is CombatStance.EVASIVE
    with pytest.raises(ValueError):
        parse_stance("Aggressive")


def test_stance_listing() -> None:
    assert all_stances() == [
        CombatStance.AGGRESSIVE,
        CombatStance.BALANCED,
        CombatStance.DEFENSIVE,
        CombatStance.EVASIVE,
    ]
    assert default_stance() is CombatStance.BALANCED
