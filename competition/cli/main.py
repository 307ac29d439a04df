"""
Command line entry point: load a configuration, then run the shell over stdin.
"""

import sys
import logging
from typing import Optional

from engine.core.errors import CompetitionError
from competition.cli.shell import CommandShell, CompetitionConfig

USAGE = "Error, usage: monster-competition <path> [<seed>|debug]"


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(level=logging.WARNING)
    logger = logging.getLogger("MonsterCompetition")

    args = sys.argv[1:] if argv is None else argv
    if not 1 <= len(args) <= 2:
        print(USAGE)
        return 1

    shell = CommandShell()
    try:
        config = CompetitionConfig.from_option(args[1] if len(args) == 2 else None)
        shell.load(args[0], config)
    except CompetitionError as e:
        print(e)
        logger.debug(f"Startup failed: {e!r}")
        return 1

    shell.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
