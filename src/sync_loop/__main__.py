"""Entry point for ``python -m sync_loop``."""

import logging
import sys

from sync_loop.cli import main
from sync_loop.logging_utils import configure_logging, install_global_exception_hooks

if __name__ == "__main__":
    log_path = configure_logging()
    install_global_exception_hooks()
    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={"log_path": str(log_path)},
    )
    try:
        exit_code = main()
    except Exception:
        logging.getLogger(__name__).exception(
            "sync-loop terminated with an unhandled exception"
        )
        raise
    sys.exit(exit_code)
