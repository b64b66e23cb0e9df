from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass, field
from typing import Sequence


def derive_seed(
    base_seed: int, *, turn: int, engagement: int, stream: str, purpose: str
) -> int:
    payload = f"{base_seed}|{turn}|{engagement}|{stream}|{purpose}".encode("utf-8")
    digest = hashlib.blake2b(payload, digest_size=8).digest()
    return int.from_bytes(digest, "big")


@dataclass()
class CombatDice:
    """Randomness for one engagement.

    Scripted rolls are consumed in order first. After that a fixed random value
    (when given) decides every draw, otherwise the seeded generator does.
    """

    rng: random.Random
    roll_overrides: tuple[int, ...] = ()
    random_override: float | None = None
    cursor: int = field(default=0)

    @classmethod
    def create(
        cls,
        *,
        seed: int | None = None,
        roll_overrides: Sequence[int] = (),
        random_override: float | None = None,
        sides: int = 20,
    ) -> "CombatDice":
        for value in roll_overrides:
            if not 1 <= value <= sides:
                raise ValueError(f"roll override {value} outside 1..{sides}")
        return cls(
            rng=random.Random(seed),
            roll_overrides=tuple(roll_overrides),
            random_override=random_override,
        )

    def roll(self, sides: int = 20) -> int:
        if self.cursor < len(self.roll_overrides):
            value = self.roll_overrides[self.cursor]
            self.cursor += 1
            return value
        if self.random_override is not None:
            return min(sides, 1 + int(self.random_override * sides))
        return self.rng.randint(1, sides)

    def random(self) -> float:
        if self.random_override is not None:
            return self.random_override
        return self.rng.random()
