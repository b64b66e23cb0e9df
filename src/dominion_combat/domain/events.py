"""Explainability events."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CombatFactor:
    name: str
    value: float
    delta: str  # "+2 attack" | "x1.25" | ...
    why: str
