"""Main CLI application module."""

from .gateway_commands import app


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
