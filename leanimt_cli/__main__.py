"""
Module execution entry point.

Allows running with: python -m leanimt_cli
"""

import sys
from leanimt_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
