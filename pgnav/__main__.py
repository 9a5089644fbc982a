"""Entrypoint for `python -m pgnav`."""

from .cli import main


if __name__ == "__main__":
    main()
