"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m leanimt_cli build LEAF... [--from-file PATH] [--hash NAME] [--out PATH] [--json]
    python -m leanimt_cli insert TREE_PATH LEAF... [--from-file PATH] [--json]
    python -m leanimt_cli update TREE_PATH INDEX LEAF [--json]
    python -m leanimt_cli prove TREE_PATH INDEX [--out PATH]
    python -m leanimt_cli verify PROOF_PATH [--json]
    python -m leanimt_cli config --init

Environment Variables:
    LEANIMT_HASH_SCHEME         Hash scheme: sha256 (bytes leaves) or field (integer leaves)
    LEANIMT_JSON_INDENT         Indent for written JSON files
    LEANIMT_LOG_LEVEL           Log level (default: INFO)
    LEANIMT_LOG_FILE            Optional log file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from core.crypto import HASH_SCHEMES
from leanimt_cli import __version__
from leanimt_cli.commands import proof, tree
from leanimt_cli.config import load_config, get_default_config_template


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def _add_common_options(parser: argparse.ArgumentParser, with_json: bool = True) -> None:
    parser.add_argument(
        "--hash",
        type=str,
        choices=sorted(HASH_SCHEMES),
        default=None,
        help="Hash scheme (default: from config, sha256)",
    )
    if with_json:
        parser.add_argument(
            "--json",
            action="store_true",
            default=False,
            help="Output machine-readable JSON",
        )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="leanimt",
        description="Lean IMT CLI - Build incremental Merkle trees, generate and verify proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./leanimt.yaml or ~/.config/leanimt/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build a tree from leaves",
        description="Build a tree in one pass and optionally save its export payload.",
    )
    build_parser.add_argument(
        "leaves",
        nargs="*",
        help="Leaf values (0x hex for sha256, integers for field)",
    )
    build_parser.add_argument(
        "--from-file",
        type=str,
        default=None,
        help="JSON file holding a list of leaf values",
    )
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Output path for the tree payload",
    )
    _add_common_options(build_parser)
    build_parser.set_defaults(func=tree.build_cmd)

    # --- insert command ---
    insert_parser = subparsers.add_parser(
        "insert",
        help="Append leaves to a stored tree",
    )
    insert_parser.add_argument("tree_path", type=str, help="Tree payload file")
    insert_parser.add_argument("leaves", nargs="*", help="Leaf values to append")
    insert_parser.add_argument(
        "--from-file",
        type=str,
        default=None,
        help="JSON file holding a list of leaf values",
    )
    _add_common_options(insert_parser)
    insert_parser.set_defaults(func=tree.insert_cmd)

    # --- update command ---
    update_parser = subparsers.add_parser(
        "update",
        help="Replace a leaf in a stored tree",
    )
    update_parser.add_argument("tree_path", type=str, help="Tree payload file")
    update_parser.add_argument("index", type=int, help="Index of the leaf to replace")
    update_parser.add_argument("leaf", type=str, help="New leaf value")
    _add_common_options(update_parser)
    update_parser.set_defaults(func=tree.update_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Generate a membership proof",
    )
    prove_parser.add_argument("tree_path", type=str, help="Tree payload file")
    prove_parser.add_argument("index", type=int, help="Index of the leaf to prove")
    prove_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Output path for the proof (default: stdout)",
    )
    _add_common_options(prove_parser, with_json=False)
    prove_parser.set_defaults(func=proof.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a proof file offline",
    )
    verify_parser.add_argument("proof_path", type=str, help="Proof JSON file")
    _add_common_options(verify_parser)
    verify_parser.set_defaults(func=proof.verify_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="leanimt.yaml",
        help="Path for config file (default: leanimt.yaml)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("You can also use environment variables (LEANIMT_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: leanimt config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    log_level = args.log_level or config.logging.level
    setup_logging(level=log_level, log_file=config.logging.log_file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "log_level", None) == "DEBUG":
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
