"""Entry point for running as module: python -m divtrack"""

import sys

from divtrack.cli.commands import main

if __name__ == "__main__":
    sys.exit(main())
