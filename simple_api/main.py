"""
main.py
=======
Process entry point.

    simple-api-demo          (console script)
    python -m simple_api.main
    python server.py

Exit codes: 0 after a requested shutdown (SIGINT/SIGTERM), 1 on any
configuration or server failure.
"""

import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from simple_api.core.config import load_config
from simple_api.core.errors import ConfigurationError, ServerError
from simple_api.core.logging_setup import configure_logging
from simple_api.core.server_manager import ServerManager

logger = logging.getLogger("simple_api")


def main() -> int:
    # .env never overrides variables already set in the environment
    load_dotenv()
    configure_logging()

    try:
        config = load_config(dict(os.environ))
    except ConfigurationError as exc:
        logger.error("Failed to load configuration: %s", exc)
        return 1

    configure_logging(config.log_level)
    manager = ServerManager(config, install_signal_handlers=True)

    try:
        asyncio.run(manager.run())
    except ServerError as exc:
        logger.error("Failed to run servers: %s", exc)
        return 1
    except KeyboardInterrupt:
        # Ctrl+C before the signal handlers were installed
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
