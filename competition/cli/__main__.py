"""Allows ``python -m competition.cli``."""

import sys

from competition.cli.main import main

sys.exit(main())
