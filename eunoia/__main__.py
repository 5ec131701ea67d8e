"""
Entry point for running eunoia as a module: python -m eunoia
"""

from eunoia.cli.commands import app

if __name__ == "__main__":
    app()
