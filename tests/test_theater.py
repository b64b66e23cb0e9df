from __future__ import annotations

from dominion_combat.domain.types import Force, Side, Theater, UnitType
from dominion_combat.systems.theater import (
    GROUND_SUPERIORITY,
    ORBITAL_SHIELD,
    SPACE_DOMINANCE,
    analyze_theater_control,
    count_units_in_theater,
    theater_bonus_display,
    unit_theater,
    units_in_theater,
)


def _names(bonuses) -> list[str]:
    return [bonus.name for bonus in bonuses]


def test_unit_theaters() -> None:
    assert unit_theater(UnitType.SOLDIERS) is Theater.GROUND
    assert unit_theater(UnitType.STATIONS) is Theater.ORBITAL
    assert set(units_in_theater(Theater.SPACE)) == {
        UnitType.LIGHT_CRUISERS,
        UnitType.HEAVY_CRUISERS,
        UnitType.CARRIERS,
    }
    force = Force(light_cruisers=3, heavy_cruisers=2, carriers=1, fighters=9)
    assert count_units_in_theater(force, Theater.SPACE) == 6
    assert count_units_in_theater(force, Theater.ORBITAL) == 9


def test_space_dominance_at_two_to_one() -> None:
    analysis = analyze_theater_control(Force(light_cruisers=20), Force(light_cruisers=10))
    assert _names(analysis.attacker_bonuses) == [SPACE_DOMINANCE]
    assert analysis.attacker_attack_mod == 2

    analysis = analyze_theater_control(Force(light_cruisers=19), Force(light_cruisers=10))
    assert analysis.attacker_bonuses == ()
    assert analysis.attacker_attack_mod == 0


def test_space_dominance_against_empty_space() -> None:
    analysis = analyze_theater_control(Force(carriers=1), Force(soldiers=1000))
    assert SPACE_DOMINANCE in _names(analysis.attacker_bonuses)
    analysis = analyze_theater_control(Force(soldiers=10), Force(soldiers=10))
    assert SPACE_DOMINANCE not in _names(analysis.attacker_bonuses)


def test_orbital_shield_from_any_station() -> None:
    analysis = analyze_theater_control(Force(light_cruisers=50), Force(stations=1))
    assert _names(analysis.defender_bonuses) == [ORBITAL_SHIELD]
    assert analysis.defender_defense_mod == 2
    # Attacking stations never shield.
    analysis = analyze_theater_control(Force(stations=5), Force(light_cruisers=1))
    assert analysis.defender_bonuses == ()


def test_ground_superiority_is_flag_only() -> None:
    analysis = analyze_theater_control(Force(soldiers=300), Force(soldiers=100))
    assert analysis.attacker_has_ground_superiority
    assert _names(analysis.attacker_bonuses) == [GROUND_SUPERIORITY]
    assert analysis.attacker_attack_mod == 0

    assert not analyze_theater_control(Force(soldiers=299), Force(soldiers=100)).attacker_has_ground_superiority
    assert analyze_theater_control(Force(soldiers=1), Force()).attacker_has_ground_superiority
    assert not analyze_theater_control(Force(), Force()).attacker_has_ground_superiority


def test_bonuses_stack() -> None:
    analysis = analyze_theater_control(
        Force(light_cruisers=40, soldiers=900), Force(light_cruisers=10, soldiers=100, stations=2)
    )
    assert _names(analysis.attacker_bonuses) == [SPACE_DOMINANCE, GROUND_SUPERIORITY]
    assert _names(analysis.defender_bonuses) == [ORBITAL_SHIELD]


def test_bonus_display() -> None:
    analysis = analyze_theater_control(Force(light_cruisers=1), Force(light_cruisers=1))
    assert theater_bonus_display(analysis, Side.ATTACKER) == ["No theater bonuses"]
    analysis = analyze_theater_control(Force(light_cruisers=1), Force(stations=1))
    assert theater_bonus_display(analysis, Side.DEFENDER) == ["Orbital Shield: +2 defense against all rolls"]
