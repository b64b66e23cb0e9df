from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from dominion_combat.domain.battle_models import BattleOptions, BattleResult, RetreatOrder
from dominion_combat.domain.types import CombatStance, Force, Side
from dominion_combat.rules.ruleset import Ruleset, RulesError
from dominion_combat.systems.battle import (
    battle_summary,
    estimate_win_probability,
    outcome_display,
    volley_description,
)
from dominion_combat.systems.strategies import STRATEGIES, Engagement, EngagementContext, resolve_engagement
from dominion_combat.systems.volley import summarize_volley


def parse_force(text: str) -> Force:
    """Parse ``light_cruisers=20,soldiers=500`` into a Force."""
    counts: dict[str, int] = {}
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        key, sep, value = part.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"expected unit=count, got {part!r}")
        try:
            counts[key.strip()] = int(value)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"count for {key.strip()!r} must be an integer") from exc
    try:
        return Force.from_counts(counts)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def parse_retreat(text: str) -> RetreatOrder:
    """Parse ``attacker:1`` / ``defender:2``."""
    side, _, volley = text.partition(":")
    try:
        return RetreatOrder(side=Side(side), after_volley=int(volley or "1"))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid retreat order {text!r}: {exc}") from exc


def _battle_detail(result: BattleResult) -> dict[str, Any]:
    return {
        "display": outcome_display(result.outcome),
        "summary": battle_summary(result),
        "score": {"attacker": result.score.attacker, "defender": result.score.defender},
        "theater": {
            "attacker": [bonus.name for bonus in result.theater.attacker_bonuses],
            "defender": [bonus.name for bonus in result.theater.defender_bonuses],
        },
        "volleys": [
            {
                "volley": volley.volley_number,
                "winner": volley.winner.value,
                "description": volley_description(volley),
                "attacker": asdict(summarize_volley(volley, Side.ATTACKER)),
                "defender": asdict(summarize_volley(volley, Side.DEFENDER)),
                "forces": {
                    "attacker_start": volley.attacker_start.to_dict(),
                    "attacker_end": volley.attacker_end.to_dict(),
                    "defender_start": volley.defender_start.to_dict(),
                    "defender_end": volley.defender_end.to_dict(),
                },
            }
            for volley in result.volleys
        ],
        "retreating_side": result.retreating_side.value if result.retreating_side else None,
        "factors": [{"name": f.name, "delta": f.delta, "why": f.why} for f in result.factors],
    }


def engagement_report(engagement: Engagement) -> dict[str, Any]:
    report: dict[str, Any] = {
        "strategy": engagement.strategy,
        "attacker_outcome": engagement.attacker_outcome.value,
        "sectors_captured": engagement.sectors_captured,
        "attacker_casualties": engagement.attacker_casualties.to_dict(),
        "defender_casualties": engagement.defender_casualties.to_dict(),
    }
    detail = engagement.detail
    if isinstance(detail, BattleResult):
        report["outcome"] = detail.outcome.value
        report.update(_battle_detail(detail))
    else:
        report["win_chance"] = round(detail.attacker_win_chance, 4)
        report["summary"] = detail.summary
        report["narrative"] = list(detail.narrative)
    return report


def _add_force_args(parser: argparse.ArgumentParser) -> None:
    stances = [stance.value for stance in CombatStance]
    parser.add_argument("--attacker", type=parse_force, required=True, help="e.g. light_cruisers=20,soldiers=500")
    parser.add_argument("--defender", type=parse_force, required=True)
    parser.add_argument("--attacker-stance", choices=stances, default=CombatStance.BALANCED.value)
    parser.add_argument("--defender-stance", choices=stances, default=CombatStance.BALANCED.value)
    parser.add_argument("--seed", type=int, default=None)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m dominion_combat",
        description="Resolve combat engagements outside the game loop.",
    )
    parser.add_argument("--rules-dir", type=Path, default=None, help="Directory with unit_stats.json and combat.json.")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="command", required=True)

    battle = sub.add_parser("battle", help="Resolve a single engagement and print a JSON report.")
    _add_force_args(battle)
    battle.add_argument("--sectors", type=int, default=10, help="Defender sector count.")
    battle.add_argument("--retreat", type=parse_retreat, default=None, help="e.g. attacker:1")
    battle.add_argument("--strategy", choices=sorted(STRATEGIES), default="volley")

    estimate = sub.add_parser("estimate", help="Monte-Carlo attacker win probability.")
    _add_force_args(estimate)
    estimate.add_argument("--iterations", type=int, default=100)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        rules = Ruleset.load(args.rules_dir) if args.rules_dir is not None else Ruleset.default()
    except RulesError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    attacker_stance = CombatStance(args.attacker_stance)
    defender_stance = CombatStance(args.defender_stance)

    try:
        if args.command == "battle":
            options = BattleOptions(
                defender_sector_count=args.sectors,
                attacker_stance=attacker_stance,
                defender_stance=defender_stance,
                seed=args.seed,
                retreat=args.retreat,
            )
            engagement = resolve_engagement(
                args.attacker,
                args.defender,
                EngagementContext(options=options),
                strategy=args.strategy,
                rules=rules,
            )
            print(json.dumps(engagement_report(engagement), indent=2))
            return 0

        probability = estimate_win_probability(
            args.attacker,
            args.defender,
            attacker_stance=attacker_stance,
            defender_stance=defender_stance,
            iterations=args.iterations,
            seed=args.seed,
            rules=rules,
        )
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    print(json.dumps({"iterations": args.iterations, "attacker_win_probability": probability}))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
