"""Storage backend selection."""

import logging
import os

from core.config import ENV_STORAGE
from server.file_storage import FileStorage
from server.postgres_storage import PostgresStorage

logger = logging.getLogger(__name__)


def create_storage(kind: str = None):
    """Build the configured backend.

    Uses PostgreSQL by default, set SPELLOL_STORAGE=file to use file storage.
    """
    kind = kind or os.environ.get(ENV_STORAGE, 'postgres')
    if kind == 'file':
        storage = FileStorage()
        logger.info(f"Using file storage in {storage.state_dir}")
    elif kind == 'postgres':
        storage = PostgresStorage()
        logger.info("Using PostgreSQL storage")
    else:
        raise ValueError(f"Unknown storage backend: {kind!r} (expected 'postgres' or 'file')")
    return storage
