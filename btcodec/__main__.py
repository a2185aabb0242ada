"""Allow ``python -m btcodec``."""

from __future__ import annotations

from btcodec.cli.main import main

if __name__ == "__main__":
    main()
