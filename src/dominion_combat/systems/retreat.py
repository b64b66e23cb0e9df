from __future__ import annotations

import math

from dominion_combat.domain.types import Force
from dominion_combat.rules.ruleset import Ruleset


def attack_of_opportunity(survivors: Force, rules: Ruleset | None = None) -> Force:
    """Extra losses for a withdrawing force. Exempt units stay behind and take none."""
    config = (rules or Ruleset.default()).retreat
    return Force(
        **{
            unit.value: 0
            if unit in config.exempt_units
            else math.floor(count * config.attack_of_opportunity_percent)
            for unit, count in survivors.items()
        }
    )


def process_retreat(forces: Force, casualties: Force, rules: Ruleset | None = None) -> Force:
    """Return ``casualties`` plus the surcharge on whatever survived them."""
    survivors = forces.minus(casualties)
    return casualties.plus(attack_of_opportunity(survivors, rules))
