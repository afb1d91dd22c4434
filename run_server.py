#!/usr/bin/env python3
"""Run the spellol daily API server.

Host, port and log level come from SPELLOL_HOST, SPELLOL_PORT and
SPELLOL_LOG_LEVEL. Set SPELLOL_RELOAD=1 to reload on code changes.
"""

import logging
import os

import uvicorn

from core.config import (
    DEFAULT_HOST, DEFAULT_PORT,
    ENV_HOST, ENV_PORT, ENV_LOG_LEVEL, ENV_RELOAD
)

logger = logging.getLogger(__name__)


def server_options() -> dict:
    """uvicorn keyword arguments from the environment."""
    return {
        'host': os.environ.get(ENV_HOST, DEFAULT_HOST),
        'port': int(os.environ.get(ENV_PORT, DEFAULT_PORT)),
        'log_level': os.environ.get(ENV_LOG_LEVEL, 'INFO').lower(),
        'reload': os.environ.get(ENV_RELOAD) == '1'
    }


def main():
    options = server_options()
    logging.basicConfig(level=options['log_level'].upper())
    logger.info(f"Starting Spellol Daily API on http://{options['host']}:{options['port']} "
                f"(docs at /docs)")
    uvicorn.run("server.app:app", **options)


if __name__ == "__main__":
    main()
