"""
CLI command modules.
"""

from leanimt_cli.commands import proof, tree

__all__ = ["proof", "tree"]
