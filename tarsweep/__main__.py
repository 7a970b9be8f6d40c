"""Run tarsweep: python -m tarsweep"""

import sys

from tarsweep.cli import main

if __name__ == "__main__":
    sys.exit(main())
