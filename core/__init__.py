from .models import CatalogWord, ActiveEntry, RotationRequest, RotationReport
from .interfaces import CatalogStore, ActiveSetStore
from .errors import StoreError, DuplicateWordError
from .evictor import ActiveSetEvictor
from .sampler import WordSampler
from .rotation import RotationJob, main
from .schedule import load_schedule
from .config import (
    DIFFICULTIES, STRATEGY_IDS, STRATEGY_FULL,
    MAX_SAMPLE_ATTEMPTS, DEFAULT_SCHEDULE
)

__all__ = [
    'CatalogWord', 'ActiveEntry', 'RotationRequest', 'RotationReport',
    'CatalogStore', 'ActiveSetStore',
    'StoreError', 'DuplicateWordError',
    'ActiveSetEvictor', 'WordSampler', 'RotationJob', 'main',
    'load_schedule',
    'DIFFICULTIES', 'STRATEGY_IDS', 'STRATEGY_FULL',
    'MAX_SAMPLE_ATTEMPTS', 'DEFAULT_SCHEDULE'
]
