#!/usr/bin/env python3
"""Run one daily rotation. Invoked by the scheduler (cron, systemd timer)."""

import argparse
import logging
import os
import sys

from core.config import ENV_LOG_LEVEL
from core.rotation import main as rotate
from core.schedule import load_schedule
from server.storage import create_storage


def main():
    parser = argparse.ArgumentParser(description='Rotate the daily spelling word set')
    parser.add_argument(
        '--storage',
        choices=['postgres', 'file'],
        default=None,
        help='Storage backend (default: $SPELLOL_STORAGE or postgres)'
    )
    parser.add_argument(
        '--schedule',
        default=None,
        help='Rotation schedule JSON file (default: $SPELLOL_SCHEDULE_FILE or built-in)'
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=os.environ.get(ENV_LOG_LEVEL, 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    storage = create_storage(args.storage)
    try:
        print(rotate(storage, schedule=load_schedule(args.schedule)))
    finally:
        if hasattr(storage, 'close'):
            storage.close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
