# Allows the package to be run as a script using `python -m image_resolver`

from __future__ import annotations

import sys

from image_resolver.cli import main

if __name__ == "__main__":
    sys.exit(main())
