# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import os


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="GenWizard - run project generators in an isolated worker"
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help="Override runtime data directory (default: ~/.genwizard or GENWIZARD_DATA_DIR)",
    )
    sub = parser.add_subparsers(dest="command")

    # ── Wizard ────────────────────────────────────────────
    p_wizard = sub.add_parser("wizard", help="Start the generator wizard in a workspace")
    p_wizard.add_argument(
        "--workspace", default=None, metavar="DIR",
        help="Workspace root the generator writes into (default: current directory)",
    )
    p_wizard.set_defaults(func=_lazy_wizard)

    # ── Generators ────────────────────────────────────────
    p_gens = sub.add_parser("generators", help="List installed generators")
    p_gens.add_argument(
        "--workspace", default=None, metavar="DIR",
        help="Workspace root to look for local generators (default: current directory)",
    )
    p_gens.set_defaults(func=_lazy_generators)

    return parser


def cli_main(argv: list[str] | None = None) -> None:
    from dotenv import load_dotenv

    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    # Apply --data-dir override before any command
    if args.data_dir:
        os.environ["GENWIZARD_DATA_DIR"] = args.data_dir

    from genwizard.config import load_config
    from genwizard.logging_config import setup_logging
    from genwizard.paths import get_log_dir

    config = load_config()
    setup_logging(
        level=os.environ.get("GENWIZARD_LOG_LEVEL", config.system.log_level),
        log_dir=get_log_dir(),
        console_level=config.system.console_log_level,
    )

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


# ── Lazy import wrappers ──────────────────────────────────


def _lazy_wizard(args: argparse.Namespace) -> None:
    from cli.commands.wizard_cmd import cmd_wizard

    cmd_wizard(args)


def _lazy_generators(args: argparse.Namespace) -> None:
    from cli.commands.wizard_cmd import cmd_generators

    cmd_generators(args)


if __name__ == "__main__":
    cli_main()
