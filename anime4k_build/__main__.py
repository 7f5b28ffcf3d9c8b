"""
__main__ provides the console-script entrypoint for the anime4k_build package.
"""
from __future__ import annotations

import sys
import traceback

from anime4k_build.cli import CLI, execute
from anime4k_build.console import logger
from anime4k_build.errors import CompileError


def main(argv: list[str] | None = None) -> None:
    """
    main is the entrypoint for the `anime4k-build` console script.
    """
    try:
        sys.exit(execute(CLI().parse_command(argv)))
    except SystemExit as e:
        code = int(e.code) if isinstance(e.code, int) else 1
        if code == 0:
            raise
        sys.exit(code)
    except CompileError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"error: {e}")
        sys.exit(1)
    except OSError as e:
        logger.error(f"I/O error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"unexpected error: {type(e).__name__}: {e}")
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
