"""Module entry point: python -m user_movement ..."""

from user_movement.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
