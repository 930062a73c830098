"""Entry point for running comment_translate as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the comment-translate CLI application."""
    app()


if __name__ == "__main__":
    main()
