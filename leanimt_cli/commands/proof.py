"""
CLI Proof Commands

Generate a membership proof from a stored tree, or verify a proof file
offline.

Usage:
    leanimt prove tree.json 3 [--out proof.json]
    leanimt verify proof.json [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from core.merkle import LeanIMTProof, verify_lean_imt_proof
from core.schemas import LeanIMTException, dumps_canonical
from leanimt_cli.commands.tree import (
    load_tree,
    report_error,
    resolve_scheme,
    write_atomic,
)


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def prove_cmd(args: Namespace) -> int:
    """
    Execute the prove command.

    Writes the proof JSON to --out, or prints it when no path is given.
    """
    tree_path = Path(args.tree_path)
    if not tree_path.exists():
        print(f"Error: Tree not found: {tree_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        scheme = resolve_scheme(args)
        tree = load_tree(tree_path, scheme)
        proof = tree.generate_proof(args.index)
    except (LeanIMTException, ValueError, OSError) as e:
        return report_error(e, False)

    payload = dumps_canonical(
        proof.to_dict(), indent=args.cli_config.tree.json_indent, exclude_none=False
    )

    if args.out:
        out_path = Path(args.out)
        try:
            write_atomic(out_path, payload)
        except OSError as e:
            return report_error(e, False)
        logger.info(f"Wrote proof for leaf {args.index} to: {out_path}")
        print(f"Proof for leaf {args.index} written to {out_path}")
    else:
        print(payload)

    return EXIT_SUCCESS


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Returns:
        EXIT_SUCCESS if the proof reproduces its root,
        EXIT_VERIFICATION_FAILED if it does not,
        EXIT_RUNTIME_ERROR for unreadable or malformed proofs
    """
    proof_path = Path(args.proof_path)
    if not proof_path.exists():
        print(f"Error: Proof not found: {proof_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        scheme = resolve_scheme(args)
        with open(proof_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        proof = LeanIMTProof.from_dict(data, scheme.map_value)
        ok = verify_lean_imt_proof(proof, scheme.hash_fn)
    except (LeanIMTException, ValueError, OSError) as e:
        return report_error(e, args.json)

    logger.info(f"Proof verification for leaf {proof.index}: {'ok' if ok else 'failed'}")

    if args.json:
        print(json.dumps({
            "proof_path": str(proof_path),
            "index": proof.index,
            "size": proof.size,
            "ok": ok,
        }, indent=2))
    else:
        print(f"proof: {proof_path}")
        print(f"index: {proof.index}")
        print(f"ok: {str(ok).lower()}")

    return EXIT_SUCCESS if ok else EXIT_VERIFICATION_FAILED
