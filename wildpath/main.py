# wildpath/main.py
"""Main entry point for the wildpath CLI application."""

from wildpath.cli.interface import main_cli


def entrypoint():
    """Function to be called by the script defined in pyproject.toml."""
    main_cli(prog_name="wildpath")

if __name__ == '__main__':
    entrypoint()
