"""Allow ``python -m specharvest.cli`` execution."""

import sys

from specharvest.cli.harvest import main

sys.exit(main())
