from __future__ import annotations

import argparse
import json
from pathlib import Path

import pytest

from dominion_combat.cli import main, parse_force, parse_retreat
from dominion_combat.domain.types import Force, Side


def test_parse_force() -> None:
    assert parse_force("light_cruisers=20, soldiers=500,") == Force(light_cruisers=20, soldiers=500)
    with pytest.raises(argparse.ArgumentTypeError):
        parse_force("light_cruisers")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_force("light_cruisers=many")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_force("dreadnoughts=3")


def test_parse_retreat() -> None:
    order = parse_retreat("defender:2")
    assert order.side is Side.DEFENDER
    assert order.after_volley == 2
    assert parse_retreat("attacker").after_volley == 1
    with pytest.raises(argparse.ArgumentTypeError):
        parse_retreat("attacker:3")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_retreat("observer:1")


def test_battle_command_prints_report(capsys) -> None:
    code = main(
        [
            "battle",
            "--attacker",
            "light_cruisers=20,soldiers=500,fighters=100",
            "--defender",
            "light_cruisers=20,soldiers=500,fighters=100",
            "--sectors",
            "25",
            "--seed",
            "7",
        ]
    )
    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["strategy"] == "volley"
    assert report["outcome"] in {"attacker_victory", "defender_victory"}
    assert report["summary"].startswith(f"Battle resolved in {len(report['volleys'])} volleys")
    assert report["volleys"][0]["description"].startswith("Volley 1: Space Combat.")
    assert 2 <= len(report["volleys"]) <= 3
    assert 0 <= report["sectors_captured"] < 25


def test_unified_battle_command(capsys) -> None:
    code = main(
        [
            "battle",
            "--strategy",
            "unified",
            "--attacker",
            "light_cruisers=20",
            "--defender",
            "light_cruisers=10",
            "--seed",
            "3",
        ]
    )
    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["strategy"] == "unified"
    assert 0.0 < report["win_chance"] < 1.0
    assert len(report["narrative"]) == 3


def test_estimate_command(capsys) -> None:
    code = main(
        [
            "estimate",
            "--attacker",
            "light_cruisers=20",
            "--defender",
            "light_cruisers=20",
            "--iterations",
            "20",
            "--seed",
            "1",
        ]
    )
    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["iterations"] == 20
    assert 0.0 <= report["attacker_win_probability"] <= 1.0


def test_bad_rules_dir_exits_with_error(tmp_path: Path, capsys) -> None:
    code = main(
        [
            "--rules-dir",
            str(tmp_path),
            "battle",
            "--attacker",
            "soldiers=10",
            "--defender",
            "soldiers=10",
        ]
    )
    assert code == 2
    assert "error:" in capsys.readouterr().err


def test_invalid_values_exit_with_error(capsys) -> None:
    code = main(["battle", "--attacker", "soldiers=10", "--defender", "soldiers=10", "--sectors", "-1"])
    assert code == 2
    assert "defender_sector_count" in capsys.readouterr().err
    assert main(["estimate", "--attacker", "soldiers=1", "--defender", "soldiers=1", "--iterations", "0"]) == 2


def test_argparse_rejects_unknown_units() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["battle", "--attacker", "dreadnoughts=1", "--defender", "soldiers=1"])
    assert excinfo.value.code == 2
