"""
CLI Tree Commands

Build a tree from leaves, append to it, or update a leaf. Trees are
stored as export payloads (JSON levels).

Usage:
    leanimt build 0x01.. 0x02.. [--from-file leaves.json] [--out tree.json] [--json]
    leanimt insert tree.json 0x03.. [--json]
    leanimt update tree.json 1 0x04.. [--json]
"""

from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
from argparse import Namespace
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any

from core.crypto import HashScheme, get_hash_scheme
from core.merkle import LeanIMT
from core.schemas import LeanIMTException, canonicalize_value


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


@dataclass
class TreeSummary:
    """Summary of a tree for CLI output."""
    tree_path: str = ""
    hash_scheme: str = ""
    root: Any = None
    size: int = 0
    depth: int = 0

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["root"] = canonicalize_value(self.root)
        if not d["tree_path"]:
            del d["tree_path"]
        return d


def resolve_scheme(args: Namespace) -> HashScheme:
    """Hash scheme from --hash, falling back to the loaded config."""
    name = getattr(args, "hash", None) or args.cli_config.tree.hash_scheme
    return get_hash_scheme(name)


def read_leaves(args: Namespace, scheme: HashScheme) -> list[Any]:
    """Leaves from positional arguments followed by --from-file entries."""
    leaves = [scheme.parse_leaf(text) for text in getattr(args, "leaves", None) or []]

    from_file = getattr(args, "from_file", None)
    if from_file:
        with open(from_file, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, list):
            raise ValueError(f"Leaves file must contain a JSON list: {from_file}")
        leaves.extend(scheme.map_value(value) for value in raw)

    return leaves


def load_tree(path: Path, scheme: HashScheme) -> LeanIMT[Any]:
    """Import a tree from an export payload on disk."""
    logger.info(f"Loading tree from: {path}")
    return LeanIMT.import_(scheme.hash_fn, path.read_text(encoding="utf-8"), scheme.map_value)


def write_atomic(path: Path, payload: str) -> None:
    """Write text to a temporary sibling file, then rename it over path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as tmp:
        tmp.write(payload)
        tmp_path = Path(tmp.name)
    try:
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def save_tree(tree: LeanIMT[Any], path: Path, indent: int | None = None) -> None:
    """Write a tree's export payload to disk, replacing any previous file whole."""
    write_atomic(path, tree.export(indent=indent))
    logger.info(f"Wrote tree ({tree.size} leaves) to: {path}")


def summarize(tree: LeanIMT[Any], scheme: HashScheme, tree_path: Path | None) -> TreeSummary:
    return TreeSummary(
        tree_path=str(tree_path) if tree_path else "",
        hash_scheme=scheme.name,
        root=tree.root,
        size=tree.size,
        depth=tree.depth,
    )


def print_summary_human(summary: TreeSummary) -> None:
    """Print summary in human-readable format."""
    if summary.tree_path:
        print(f"tree: {summary.tree_path}")
    print(f"hash: {summary.hash_scheme}")
    print(f"root: {canonicalize_value(summary.root)}")
    print(f"size: {summary.size}")
    print(f"depth: {summary.depth}")


def print_summary(summary: TreeSummary, output_json: bool) -> None:
    if output_json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)


def report_error(e: Exception, output_json: bool) -> int:
    """Print a failure and return the runtime error exit code."""
    if output_json and isinstance(e, LeanIMTException):
        print(json.dumps(e.to_error_model().model_dump(), indent=2))
    else:
        print(f"Error: {e}", file=sys.stderr)
    return EXIT_RUNTIME_ERROR


def build_cmd(args: Namespace) -> int:
    """
    Execute the build command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    out_path = Path(args.out) if args.out else None

    try:
        scheme = resolve_scheme(args)
        leaves = read_leaves(args, scheme)
        tree: LeanIMT[Any] = LeanIMT(scheme.hash_fn, leaves)
        if out_path:
            save_tree(tree, out_path, args.cli_config.tree.json_indent)
    except (LeanIMTException, ValueError, OSError) as e:
        return report_error(e, args.json)

    print_summary(summarize(tree, scheme, out_path), args.json)
    return EXIT_SUCCESS


def insert_cmd(args: Namespace) -> int:
    """Execute the insert command (append leaves and rewrite the tree file)."""
    tree_path = Path(args.tree_path)
    if not tree_path.exists():
        print(f"Error: Tree not found: {tree_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        scheme = resolve_scheme(args)
        tree = load_tree(tree_path, scheme)
        leaves = read_leaves(args, scheme)
        if len(leaves) == 1:
            tree.insert(leaves[0])
        else:
            tree.insert_many(leaves)
        save_tree(tree, tree_path, args.cli_config.tree.json_indent)
    except (LeanIMTException, ValueError, OSError) as e:
        return report_error(e, args.json)

    print_summary(summarize(tree, scheme, tree_path), args.json)
    return EXIT_SUCCESS


def update_cmd(args: Namespace) -> int:
    """Execute the update command (replace one leaf and rewrite the tree file)."""
    tree_path = Path(args.tree_path)
    if not tree_path.exists():
        print(f"Error: Tree not found: {tree_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        scheme = resolve_scheme(args)
        tree = load_tree(tree_path, scheme)
        tree.update(args.index, scheme.parse_leaf(args.leaf))
        save_tree(tree, tree_path, args.cli_config.tree.json_indent)
    except (LeanIMTException, ValueError, OSError) as e:
        return report_error(e, args.json)

    print_summary(summarize(tree, scheme, tree_path), args.json)
    return EXIT_SUCCESS
