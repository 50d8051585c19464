"""Allow ``python -m payroll_anomaly``."""

import sys

from payroll_anomaly.cli import main

if __name__ == "__main__":
    sys.exit(main())
