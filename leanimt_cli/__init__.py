"""
Lean IMT CLI

Command-line interface for building, mutating and proving against
Lean incremental Merkle trees.

Usage:
    python -m leanimt_cli build 0x01.. 0x02.. --out tree.json
    python -m leanimt_cli insert tree.json 0x03..
    python -m leanimt_cli update tree.json 0 0x04..
    python -m leanimt_cli prove tree.json 1 --out proof.json
    python -m leanimt_cli verify proof.json
"""

__version__ = "0.1.0"
