"""Entry point for ``python -m rabbithole``."""

import sys

from rabbithole.cli.commands import cli


def main() -> int:
    """Run the click command group."""
    return cli(prog_name="rabbithole")


if __name__ == "__main__":
    sys.exit(main())
