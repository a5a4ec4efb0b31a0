"""
Entry point for running Version Ledger as a module.

Enables execution via:
    python -m version_ledger [command] [options]

This is equivalent to running the installed CLI:
    version-ledger [command] [options]
"""

from version_ledger.cli import app

if __name__ == "__main__":
    app()
