"""Module entrypoint for running psdtranslate as ``python -m psdtranslate``."""

from __future__ import annotations

from psdtranslate.cli import main


if __name__ == "__main__":
    main()
