"""Tests for the rules loader."""

import json
import shutil
from pathlib import Path

import pytest

from dominion_combat.domain.battle_models import BattleOptions
from dominion_combat.domain.types import CombatStance, Force, Theater, UnitType
from dominion_combat.rules.ruleset import DEFAULT_DATA_DIR, MissingUnitProfileError, RulesError, Ruleset
from dominion_combat.systems.battle import resolve_battle


def _copy_rules(tmp_path: Path) -> Path:
    for name in ("unit_stats.json", "combat.json"):
        shutil.copy(DEFAULT_DATA_DIR / name, tmp_path / name)
    return tmp_path


def _rewrite(path: Path, edit) -> None:
    data = json.loads(path.read_text(encoding="utf-8"))
    edit(data)
    path.write_text(json.dumps(data), encoding="utf-8")


def test_default_ruleset_contract() -> None:
    """Every unit and stance is described with sane values."""
    rules = Ruleset.default()
    assert set(rules.units) == set(UnitType)
    assert set(rules.stances) == set(CombatStance)
    for unit, profile in rules.units.items():
        assert profile.unit is unit
        assert profile.name
        assert profile.hull > 0
        assert profile.hull_per > 0
        assert 1 <= profile.defense <= 20
    assert rules.profile(UnitType.SOLDIERS).theater is Theater.GROUND
    assert rules.profile(UnitType.STATIONS).theater is Theater.ORBITAL
    assert rules.volley.max_volleys == 3
    assert rules.volley.wins_to_decide == 2
    assert rules.volley.defense_only_units == frozenset({UnitType.STATIONS})
    assert rules.underdog.punchup_enabled
    assert rules.underdog.networth_enabled


def test_default_is_cached() -> None:
    assert Ruleset.default() is Ruleset.default()


def test_unit_stats_values() -> None:
    rules = Ruleset.default()
    cruiser = rules.profile(UnitType.LIGHT_CRUISERS)
    assert (cruiser.attack_mod, cruiser.defense, cruiser.hull, cruiser.hull_per) == (4, 15, 3, 1)
    soldiers = rules.profile(UnitType.SOLDIERS)
    assert (soldiers.attack_mod, soldiers.defense, soldiers.hull, soldiers.hull_per) == (2, 13, 1, 50)


def test_stance_table() -> None:
    aggressive = Ruleset.default().stance(CombatStance.AGGRESSIVE)
    assert aggressive.attack_mod == 3
    assert aggressive.defense_mod == -2
    assert aggressive.casualty_multiplier == pytest.approx(1.2)


def test_rules_missing_file(tmp_path: Path) -> None:
    """Test error handling for missing rules file."""
    with pytest.raises(RulesError):
        Ruleset.load(tmp_path / "nonexistent")


def test_rules_invalid_json(tmp_path: Path) -> None:
    """Test error handling for invalid JSON."""
    data_dir = _copy_rules(tmp_path)
    (data_dir / "combat.json").write_text("{ invalid json }")
    with pytest.raises(RulesError):
        Ruleset.load(data_dir)


def test_rules_unknown_unit(tmp_path: Path) -> None:
    data_dir = _copy_rules(tmp_path)
    _rewrite(data_dir / "unit_stats.json", lambda data: data["units"][0].update(id="battleships"))
    with pytest.raises(RulesError, match="unknown unit type"):
        Ruleset.load(data_dir)


def test_rules_missing_stance(tmp_path: Path) -> None:
    data_dir = _copy_rules(tmp_path)
    _rewrite(data_dir / "combat.json", lambda data: data["stances"].pop("evasive"))
    with pytest.raises(RulesError, match="evasive"):
        Ruleset.load(data_dir)


def test_rules_volley_count_must_match_majority(tmp_path: Path) -> None:
    data_dir = _copy_rules(tmp_path)
    _rewrite(data_dir / "combat.json", lambda data: data["volley"].update(max_volleys=4))
    with pytest.raises(RulesError, match="max_volleys"):
        Ruleset.load(data_dir)


def test_underdog_flags_default_off(tmp_path: Path) -> None:
    data_dir = _copy_rules(tmp_path)

    def _drop_flags(data: dict) -> None:
        data["underdog"].pop("punchup_enabled")
        data["underdog"].pop("networth_enabled")

    _rewrite(data_dir / "combat.json", _drop_flags)
    rules = Ruleset.load(data_dir)
    assert not rules.underdog.punchup_enabled
    assert not rules.underdog.networth_enabled


def test_missing_profile_fails_loudly(tmp_path: Path) -> None:
    data_dir = _copy_rules(tmp_path)

    def _drop_carriers(data: dict) -> None:
        data["units"] = [item for item in data["units"] if item["id"] != "carriers"]

    _rewrite(data_dir / "unit_stats.json", _drop_carriers)
    rules = Ruleset.load(data_dir)
    with pytest.raises(MissingUnitProfileError) as excinfo:
        rules.profile(UnitType.CARRIERS)
    assert excinfo.value.unit is UnitType.CARRIERS

    with pytest.raises(MissingUnitProfileError):
        resolve_battle(
            Force(carriers=5),
            Force(light_cruisers=5),
            BattleOptions(defender_sector_count=10, seed=1),
            rules,
        )
