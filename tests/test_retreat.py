from __future__ import annotations

from dominion_combat.domain.types import Force
from dominion_combat.systems.retreat import attack_of_opportunity, process_retreat


def test_retreat_with_hundred_soldiers_loses_fifteen() -> None:
    casualties = process_retreat(Force(soldiers=100), Force())
    assert casualties == Force(soldiers=15)


def test_surcharge_applies_to_survivors_only() -> None:
    forces = Force(soldiers=100, light_cruisers=40)
    casualties = process_retreat(forces, Force(soldiers=20, light_cruisers=10))
    # 80 soldiers and 30 cruisers survive the fighting.
    assert casualties == Force(soldiers=32, light_cruisers=14)


def test_stations_do_not_retreat() -> None:
    assert attack_of_opportunity(Force(stations=50, fighters=10)) == Force(fighters=1)


def test_nothing_left_means_no_surcharge() -> None:
    forces = Force(light_cruisers=5)
    assert process_retreat(forces, forces) == forces
