"""
Johnson command line.

Usage:
    johnson validate contract.yaml           # Grammar check for authors
    johnson preview scenario.yaml            # Pool + prevention table
    johnson resolve scenario.yaml --seed 7   # Play the resolution

    Add --json to validate/preview for machine-readable output.

Exit codes:
    0 - Success
    1 - Contract has authoring errors
    2 - File or configuration could not be loaded
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from rich.text import Text

from .. import __version__
from ..state.config import BalancingConfig, ConfigError, load_config
from ..state.loader import Scenario, load_contract, load_scenario
from ..systems.damage_table import DamageTable
from ..systems.session import ContractSession
from ..systems.validation import validate_contract
from ..tools.dice import Dice

from .playback import play_resolution
from .renderer import (
    THEME,
    console,
    render_event,
    render_pools,
    render_runners,
    render_summary,
    render_warnings,
)

logger = logging.getLogger(__name__)


def build_session(scenario: Scenario, config: BalancingConfig, seed: int | None = None) -> ContractSession:
    """Session with the scenario's contract, runners, player and selection applied."""
    table = DamageTable.from_rows(scenario.damage_table) if scenario.damage_table else None
    session = ContractSession(
        config=config,
        player=scenario.player,
        runners=scenario.runners,
        table=table,
        dice=Dice(seed if seed is not None else scenario.seed),
    )
    session.load_contract(scenario.contract)
    session.set_selection(scenario.selected)
    return session


def cmd_validate(args: argparse.Namespace, config: BalancingConfig) -> int:
    contract = load_contract(args.contract)
    errors = validate_contract(contract)

    if args.json:
        print(json.dumps({"contract": contract.id, "errors": errors}, indent=2))
    elif errors:
        for message in errors:
            console.print(Text.assemble(("x ", THEME["danger"]), message))
        console.print(Text(f"{len(errors)} problem(s) in {contract.name}", style=THEME["warning"]))
    else:
        console.print(Text(f"{contract.name}: {len(contract.nodes)} nodes, no problems", style=THEME["accent"]))

    return 1 if errors else 0


def cmd_preview(args: argparse.Namespace, config: BalancingConfig) -> int:
    scenario = load_scenario(args.scenario)
    session = build_session(scenario, config)
    breakdown = session.preview

    if args.json:
        print(json.dumps(breakdown.as_dict(), indent=2))
        return 0

    hired = session.roster.hired_runners()
    if hired:
        console.print(render_runners(hired))
    console.print(render_pools(breakdown, session.contract))
    if breakdown.warnings:
        console.print(render_warnings(breakdown.warnings))
    return 0


def cmd_resolve(args: argparse.Namespace, config: BalancingConfig) -> int:
    scenario = load_scenario(args.scenario)
    session = build_session(scenario, config, seed=args.seed)
    delay = args.delay if args.delay is not None else config.damage_roll_delay

    console.print(render_pools(session.preview, session.contract))
    resolver = session.begin_resolution()
    summary = play_resolution(
        resolver,
        delay_ms=delay,
        on_event=lambda event: console.print(render_event(event)),
    )
    console.print(render_summary(summary, session.player))
    return 0


COMMANDS = {
    "validate": cmd_validate,
    "preview": cmd_preview,
    "resolve": cmd_resolve,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="johnson",
        description="Contract perk-tree rule engine and resolution simulator",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        help="Balancing config JSON (defaults to ./balancing.json if present)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", help="Check a contract's effect and gate strings")
    validate.add_argument("contract", help="Contract YAML/JSON file")
    validate.add_argument("--json", action="store_true", help="Output JSON")

    preview = sub.add_parser("preview", help="Show pools for a scenario's selection")
    preview.add_argument("scenario", help="Scenario YAML/JSON file")
    preview.add_argument("--json", action="store_true", help="Output JSON")

    resolve = sub.add_parser("resolve", help="Resolve a scenario's contract")
    resolve.add_argument("scenario", help="Scenario YAML/JSON file")
    resolve.add_argument("--seed", type=int, default=None, help="Random seed (overrides the scenario's)")
    resolve.add_argument("--delay", type=int, default=None, help="Milliseconds between rolls")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
        return COMMANDS[args.command](args, config)
    except ConfigError as e:
        logger.debug("Load failure", exc_info=True)
        console.print(Text.assemble(("Error: ", THEME["danger"]), str(e)))
        return 2


if __name__ == "__main__":
    sys.exit(main())
