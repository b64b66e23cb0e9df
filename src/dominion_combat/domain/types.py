"""Common types and enums."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Iterator, Mapping


class UnitType(str, Enum):
    """Unit types in the order rolls are drawn for a side."""

    SOLDIERS = "soldiers"
    FIGHTERS = "fighters"
    STATIONS = "stations"
    LIGHT_CRUISERS = "light_cruisers"
    HEAVY_CRUISERS = "heavy_cruisers"
    CARRIERS = "carriers"


class Theater(str, Enum):
    SPACE = "space"
    ORBITAL = "orbital"
    GROUND = "ground"


class Side(str, Enum):
    ATTACKER = "attacker"
    DEFENDER = "defender"


class CombatStance(str, Enum):
    AGGRESSIVE = "aggressive"
    BALANCED = "balanced"
    DEFENSIVE = "defensive"
    EVASIVE = "evasive"


class CombatOutcome(str, Enum):
    """Per-side outcome fed to the effectiveness tracker."""

    VICTORY = "victory"
    DEFEAT = "defeat"
    DRAW = "draw"

    def inverted(self) -> "CombatOutcome":
        if self is CombatOutcome.VICTORY:
            return CombatOutcome.DEFEAT
        if self is CombatOutcome.DEFEAT:
            return CombatOutcome.VICTORY
        return CombatOutcome.DRAW


@dataclass(frozen=True)
class Force:
    """Unit counts for one side. Every operation returns a new Force."""

    soldiers: int = 0
    fighters: int = 0
    stations: int = 0
    light_cruisers: int = 0
    heavy_cruisers: int = 0
    carriers: int = 0

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{item.name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{item.name} must be non-negative, got {value}")

    @classmethod
    def from_counts(cls, counts: Mapping[UnitType | str, int]) -> "Force":
        values: dict[str, int] = {}
        for key, value in counts.items():
            unit = UnitType(key)
            values[unit.value] = int(value)
        return cls(**values)

    def count(self, unit: UnitType) -> int:
        return getattr(self, unit.value)

    def items(self) -> Iterator[tuple[UnitType, int]]:
        for unit in UnitType:
            yield unit, self.count(unit)

    def present(self) -> list[UnitType]:
        """Unit types with at least one unit, in roll order."""
        return [unit for unit, value in self.items() if value > 0]

    def total(self) -> int:
        return sum(value for _, value in self.items())

    def is_empty(self) -> bool:
        return self.total() == 0

    def with_count(self, unit: UnitType, value: int) -> "Force":
        return replace(self, **{unit.value: value})

    def plus(self, other: "Force") -> "Force":
        return Force(**{unit.value: self.count(unit) + other.count(unit) for unit in UnitType})

    def minus(self, other: "Force") -> "Force":
        """Subtract, clamping each count at zero."""
        return Force(
            **{unit.value: max(0, self.count(unit) - other.count(unit)) for unit in UnitType}
        )

    def capped_by(self, limit: "Force") -> "Force":
        return Force(**{unit.value: min(self.count(unit), limit.count(unit)) for unit in UnitType})

    def scaled_floor(self, factor: float) -> "Force":
        if factor < 0:
            raise ValueError("factor must be non-negative")
        return Force(
            **{unit.value: math.floor(self.count(unit) * factor) for unit in UnitType}
        )

    def to_dict(self) -> dict[str, int]:
        return {unit.value: value for unit, value in self.items()}


NO_CASUALTIES = Force()
