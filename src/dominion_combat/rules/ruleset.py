"""Data-driven combat rules."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from dominion_combat.domain.types import CombatStance, Theater, UnitType

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[1] / "data"


class RulesError(ValueError):
    """Error loading or validating rules."""


class MissingUnitProfileError(RulesError):
    """A force references a unit type the rules do not describe."""

    def __init__(self, unit: UnitType) -> None:
        super().__init__(f"Missing unit profile for {unit.value!r}")
        self.unit = unit


@dataclass(frozen=True)
class UnitCombatProfile:
    """Per unit type combat attributes."""

    unit: UnitType
    name: str
    theater: Theater
    attack_mod: int
    defense: int
    hull: int
    hull_per: int
    unified_power: float = 1.0
    fleet_power: float = 0.0


@dataclass(frozen=True)
class StanceModifiers:
    attack_mod: int
    defense_mod: int
    casualty_multiplier: float


@dataclass(frozen=True)
class VolleyConfig:
    die_sides: int
    fumble_roll: int
    critical_roll: int
    critical_multiplier: int
    max_volleys: int
    wins_to_decide: int
    defense_only_units: frozenset[UnitType]


@dataclass(frozen=True)
class TheaterConfig:
    space_dominance_ratio: float
    space_dominance_attack_bonus: int
    orbital_shield_defense_bonus: int
    ground_superiority_ratio: float


@dataclass(frozen=True)
class CaptureConfig:
    min_sectors: int
    standard_percent: float
    decisive_percent: float
    decisive_bonus_sectors: int
    crushing_defeat_multiplier: float


@dataclass(frozen=True)
class RetreatConfig:
    attack_of_opportunity_percent: float
    exempt_units: frozenset[UnitType]


@dataclass(frozen=True)
class CasualtyConfig:
    base_loss_rate: float
    min_loss_rate: float
    max_loss_rate: float
    bad_attack_ratio: float
    bad_attack_penalty: float
    overwhelming_ratio: float
    overwhelming_bonus: float
    variance_min: float
    variance_max: float
    retreat_loss_rate: float


@dataclass(frozen=True)
class EffectivenessConfig:
    default: float
    min: float
    max: float
    victory_bonus_min: int
    victory_bonus_max: int
    defeat_penalty: float
    draw_change: float
    recovery_per_turn: float
    unpaid_maintenance_penalty: float


@dataclass(frozen=True)
class CoalitionConfig:
    min_attackers: int
    bonus_per_extra_attacker: float
    max_bonus: float
    reputation_bonus: int
    production_bonus: float
    production_bonus_turns: int
    morale_bonus: float
    morale_bonus_turns: int


@dataclass(frozen=True)
class UnderdogConfig:
    power_ratio_threshold: float
    power_bonus_max: float
    networth_enabled: bool
    networth_threshold: float
    networth_bonus_min: float
    networth_bonus_max: float
    punchup_enabled: bool
    punchup_threshold: float
    punchup_max_extra_sectors: int


@dataclass(frozen=True)
class UnifiedConfig:
    defender_bonus: float
    soldiers_per_carrier: int
    min_win_chance: float
    max_win_chance: float
    draw_band: float
    draw_roll_window: float
    winner_casualty_multiplier: float
    loser_casualty_multiplier: float
    draw_casualty_multiplier: float
    capture_min_percent: float
    capture_max_percent: float


@dataclass(frozen=True)
class FleetPowerConfig:
    diversity_min_unit_types: int
    diversity_bonus: float
    defender_advantage: float
    station_defense_multiplier: float


@dataclass(frozen=True)
class Ruleset:
    """Loaded and validated ruleset."""

    version: str
    units: dict[UnitType, UnitCombatProfile]
    stances: dict[CombatStance, StanceModifiers]
    volley: VolleyConfig
    theater: TheaterConfig
    capture: CaptureConfig
    retreat: RetreatConfig
    casualties: CasualtyConfig
    effectiveness: EffectivenessConfig
    coalition: CoalitionConfig
    underdog: UnderdogConfig
    unified: UnifiedConfig
    fleet_power: FleetPowerConfig

    def profile(self, unit: UnitType) -> UnitCombatProfile:
        try:
            return self.units[unit]
        except KeyError:
            raise MissingUnitProfileError(unit) from None

    def stance(self, stance: CombatStance) -> StanceModifiers:
        return self.stances[stance]

    @staticmethod
    def load(data_dir: Path) -> "Ruleset":
        """Load ruleset from JSON files in data directory."""
        units = _load_unit_stats(data_dir / "unit_stats.json")
        combat_path = data_dir / "combat.json"
        data = _load_json(combat_path)
        return Ruleset(
            version=str(data.get("version", "1")),
            units=units,
            stances=_load_stances(combat_path, data.get("stances")),
            volley=_load_volley(combat_path, _section(combat_path, data, "volley")),
            theater=_load_theater(_section(combat_path, data, "theater")),
            capture=_load_capture(_section(combat_path, data, "capture")),
            retreat=_load_retreat(combat_path, _section(combat_path, data, "retreat")),
            casualties=_load_casualties(_section(combat_path, data, "casualties")),
            effectiveness=_load_effectiveness(_section(combat_path, data, "effectiveness")),
            coalition=_load_coalition(_section(combat_path, data, "coalition")),
            underdog=_load_underdog(_section(combat_path, data, "underdog")),
            unified=_load_unified(_section(combat_path, data, "unified")),
            fleet_power=_load_fleet_power(_section(combat_path, data, "fleet_power")),
        )

    @staticmethod
    def default() -> "Ruleset":
        """The packaged ruleset, loaded once."""
        return _default_ruleset()


@lru_cache(maxsize=1)
def _default_ruleset() -> Ruleset:
    return Ruleset.load(DEFAULT_DATA_DIR)


def _load_json(path: Path) -> dict[str, Any]:
    """Load JSON file."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as exc:
        raise RulesError(f"Rules file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise RulesError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RulesError(f"{path}: top level must be an object")
    return data


def _section(path: Path, data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise RulesError(f"{path}: '{key}' must be an object")
    return value


def _unit_set(path: Path, raw: Any, key: str) -> frozenset[UnitType]:
    if not isinstance(raw, list):
        raise RulesError(f"{path}: '{key}' must be an array")
    try:
        return frozenset(UnitType(item) for item in raw)
    except ValueError as exc:
        raise RulesError(f"{path}: '{key}' has unknown unit type: {exc}") from exc


def _load_unit_stats(path: Path) -> dict[UnitType, UnitCombatProfile]:
    """Load per unit combat profiles."""
    data = _load_json(path)
    if "units" not in data:
        raise RulesError(f"{path}: missing 'units' key")
    profiles: dict[UnitType, UnitCombatProfile] = {}
    for item in data["units"]:
        if not isinstance(item, dict):
            raise RulesError(f"{path}: unit entry must be object")
        unit_id = item.get("id")
        if not isinstance(unit_id, str):
            raise RulesError(f"{path}: unit.id must be string")
        try:
            unit = UnitType(unit_id)
        except ValueError as exc:
            raise RulesError(f"{path}: unknown unit type {unit_id!r}") from exc
        try:
            theater = Theater(item.get("theater", ""))
        except ValueError as exc:
            raise RulesError(f"{path}: unit {unit_id!r} has invalid theater") from exc
        for key in ("attack_mod", "defense", "hull", "hull_per"):
            if not isinstance(item.get(key), int):
                raise RulesError(f"{path}: unit {unit_id!r} needs integer '{key}'")
        if item["hull"] <= 0 or item["hull_per"] <= 0:
            raise RulesError(f"{path}: unit {unit_id!r} hull values must be positive")
        profiles[unit] = UnitCombatProfile(
            unit=unit,
            name=str(item.get("name", unit_id)),
            theater=theater,
            attack_mod=int(item["attack_mod"]),
            defense=int(item["defense"]),
            hull=int(item["hull"]),
            hull_per=int(item["hull_per"]),
            unified_power=float(item.get("unified_power", 1.0)),
            fleet_power=float(item.get("fleet_power", 0.0)),
        )
    return profiles


def _load_stances(path: Path, raw: Any) -> dict[CombatStance, StanceModifiers]:
    if not isinstance(raw, dict):
        raise RulesError(f"{path}: missing 'stances' object")
    stances: dict[CombatStance, StanceModifiers] = {}
    for stance in CombatStance:
        entry = raw.get(stance.value)
        if not isinstance(entry, dict):
            raise RulesError(f"{path}: stance {stance.value!r} must be defined")
        stances[stance] = StanceModifiers(
            attack_mod=int(entry.get("attack_mod", 0)),
            defense_mod=int(entry.get("defense_mod", 0)),
            casualty_multiplier=float(entry.get("casualty_multiplier", 1.0)),
        )
    return stances


def _load_volley(path: Path, data: dict[str, Any]) -> VolleyConfig:
    config = VolleyConfig(
        die_sides=int(data.get("die_sides", 20)),
        fumble_roll=int(data.get("fumble_roll", 1)),
        critical_roll=int(data.get("critical_roll", 20)),
        critical_multiplier=int(data.get("critical_multiplier", 2)),
        max_volleys=int(data.get("max_volleys", 3)),
        wins_to_decide=int(data.get("wins_to_decide", 2)),
        defense_only_units=_unit_set(
            path, data.get("defense_only_units", ["stations"]), "defense_only_units"
        ),
    )
    if config.max_volleys != 2 * config.wins_to_decide - 1:
        raise RulesError(f"{path}: volley.max_volleys must equal 2 * wins_to_decide - 1")
    return config


def _load_theater(data: dict[str, Any]) -> TheaterConfig:
    return TheaterConfig(
        space_dominance_ratio=float(data.get("space_dominance_ratio", 2.0)),
        space_dominance_attack_bonus=int(data.get("space_dominance_attack_bonus", 2)),
        orbital_shield_defense_bonus=int(data.get("orbital_shield_defense_bonus", 2)),
        ground_superiority_ratio=float(data.get("ground_superiority_ratio", 3.0)),
    )


def _load_capture(data: dict[str, Any]) -> CaptureConfig:
    return CaptureConfig(
        min_sectors=int(data.get("min_sectors", 1)),
        standard_percent=float(data.get("standard_percent", 0.10)),
        decisive_percent=float(data.get("decisive_percent", 0.15)),
        decisive_bonus_sectors=int(data.get("decisive_bonus_sectors", 1)),
        crushing_defeat_multiplier=float(data.get("crushing_defeat_multiplier", 1.25)),
    )


def _load_retreat(path: Path, data: dict[str, Any]) -> RetreatConfig:
    return RetreatConfig(
        attack_of_opportunity_percent=float(data.get("attack_of_opportunity_percent", 0.15)),
        exempt_units=_unit_set(path, data.get("exempt_units", ["stations"]), "exempt_units"),
    )


def _load_casualties(data: dict[str, Any]) -> CasualtyConfig:
    return CasualtyConfig(
        base_loss_rate=float(data.get("base_loss_rate", 0.25)),
        min_loss_rate=float(data.get("min_loss_rate", 0.15)),
        max_loss_rate=float(data.get("max_loss_rate", 0.35)),
        bad_attack_ratio=float(data.get("bad_attack_ratio", 2.0)),
        bad_attack_penalty=float(data.get("bad_attack_penalty", 0.10)),
        overwhelming_ratio=float(data.get("overwhelming_ratio", 0.5)),
        overwhelming_bonus=float(data.get("overwhelming_bonus", 0.10)),
        variance_min=float(data.get("variance_min", 0.8)),
        variance_max=float(data.get("variance_max", 1.2)),
        retreat_loss_rate=float(data.get("retreat_loss_rate", 0.15)),
    )


def _load_effectiveness(data: dict[str, Any]) -> EffectivenessConfig:
    return EffectivenessConfig(
        default=float(data.get("default", 85)),
        min=float(data.get("min", 0)),
        max=float(data.get("max", 100)),
        victory_bonus_min=int(data.get("victory_bonus_min", 5)),
        victory_bonus_max=int(data.get("victory_bonus_max", 10)),
        defeat_penalty=float(data.get("defeat_penalty", 5)),
        draw_change=float(data.get("draw_change", 0)),
        recovery_per_turn=float(data.get("recovery_per_turn", 2)),
        unpaid_maintenance_penalty=float(data.get("unpaid_maintenance_penalty", 10)),
    )


def _load_coalition(data: dict[str, Any]) -> CoalitionConfig:
    return CoalitionConfig(
        min_attackers=int(data.get("min_attackers", 3)),
        bonus_per_extra_attacker=float(data.get("bonus_per_extra_attacker", 0.05)),
        max_bonus=float(data.get("max_bonus", 0.25)),
        reputation_bonus=int(data.get("reputation_bonus", 5)),
        production_bonus=float(data.get("production_bonus", 0.10)),
        production_bonus_turns=int(data.get("production_bonus_turns", 10)),
        morale_bonus=float(data.get("morale_bonus", 0.05)),
        morale_bonus_turns=int(data.get("morale_bonus_turns", 5)),
    )


def _load_underdog(data: dict[str, Any]) -> UnderdogConfig:
    return UnderdogConfig(
        power_ratio_threshold=float(data.get("power_ratio_threshold", 0.5)),
        power_bonus_max=float(data.get("power_bonus_max", 1.25)),
        networth_enabled=bool(data.get("networth_enabled", False)),
        networth_threshold=float(data.get("networth_threshold", 0.5)),
        networth_bonus_min=float(data.get("networth_bonus_min", 1.10)),
        networth_bonus_max=float(data.get("networth_bonus_max", 1.20)),
        punchup_enabled=bool(data.get("punchup_enabled", False)),
        punchup_threshold=float(data.get("punchup_threshold", 0.75)),
        punchup_max_extra_sectors=int(data.get("punchup_max_extra_sectors", 3)),
    )


def _load_unified(data: dict[str, Any]) -> UnifiedConfig:
    return UnifiedConfig(
        defender_bonus=float(data.get("defender_bonus", 1.10)),
        soldiers_per_carrier=int(data.get("soldiers_per_carrier", 100)),
        min_win_chance=float(data.get("min_win_chance", 0.05)),
        max_win_chance=float(data.get("max_win_chance", 0.95)),
        draw_band=float(data.get("draw_band", 0.02)),
        draw_roll_window=float(data.get("draw_roll_window", 0.05)),
        winner_casualty_multiplier=float(data.get("winner_casualty_multiplier", 0.5)),
        loser_casualty_multiplier=float(data.get("loser_casualty_multiplier", 1.5)),
        draw_casualty_multiplier=float(data.get("draw_casualty_multiplier", 1.0)),
        capture_min_percent=float(data.get("capture_min_percent", 0.05)),
        capture_max_percent=float(data.get("capture_max_percent", 0.15)),
    )


def _load_fleet_power(data: dict[str, Any]) -> FleetPowerConfig:
    return FleetPowerConfig(
        diversity_min_unit_types=int(data.get("diversity_min_unit_types", 4)),
        diversity_bonus=float(data.get("diversity_bonus", 1.15)),
        defender_advantage=float(data.get("defender_advantage", 1.2)),
        station_defense_multiplier=float(data.get("station_defense_multiplier", 2.0)),
    )
