"""Entry point module for running loggrep via `python -m loggrep`."""

import sys

from loggrep.app import main

if __name__ == "__main__":
    sys.exit(main())
