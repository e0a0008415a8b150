"""Module entrypoint for running humantouch as ``python -m humantouch``."""

from __future__ import annotations

from humantouch.cli import main


if __name__ == "__main__":
    main()
