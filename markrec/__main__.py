# Allows the package to be run as a script using `python -m markrec`

from __future__ import annotations

import sys

from markrec.cli import main

if __name__ == "__main__":
    sys.exit(main())
