"""Configuration constants for spellol daily rotation."""

import os

DIFFICULTIES = ('easy', 'medium', 'difficult')

# Sampling strategies
STRATEGY_IDS = 'ids'    # Sample from the id pool, fetch each record lazily
STRATEGY_FULL = 'full'  # Fetch full records up front, bounded retry sampling
STRATEGIES = (STRATEGY_IDS, STRATEGY_FULL)

MAX_SAMPLE_ATTEMPTS = 50  # Upper bound on draws per full-set request

# Daily schedule: one request per tier/band, run in order
DEFAULT_SCHEDULE = [
    {'difficulty': 'easy', 'count': 2, 'strategy': STRATEGY_IDS},
    {'difficulty': 'medium', 'count': 3, 'strategy': STRATEGY_IDS},
    {'difficulty': 'difficult', 'count': 2, 'strategy': STRATEGY_FULL,
     'syllable_min': 1, 'syllable_max': 2},
    {'difficulty': 'difficult', 'count': 2, 'strategy': STRATEGY_FULL,
     'syllable_min': 3, 'syllable_max': 4},
    {'difficulty': 'difficult', 'count': 1, 'strategy': STRATEGY_FULL,
     'syllable_min': 5, 'syllable_max': 10},
]

# Storage
CATALOG_TABLE = 'spellol_dictionary'
ACTIVE_TABLE = 'spellol_daily'
EVENTS_TABLE = 'spellol_events'
DEFAULT_DATABASE_URL = 'postgresql://localhost:5432/spellol'
DEFAULT_STATE_DIR = os.path.expanduser('~/.local/share/spellol')

# Environment variables
ENV_STORAGE = 'SPELLOL_STORAGE'          # 'postgres' (default) or 'file'
ENV_DATABASE_URL = 'DATABASE_URL'
ENV_STATE_DIR = 'SPELLOL_STATE_DIR'
ENV_SCHEDULE_FILE = 'SPELLOL_SCHEDULE_FILE'
ENV_LOG_LEVEL = 'SPELLOL_LOG_LEVEL'
ENV_HOST = 'SPELLOL_HOST'
ENV_PORT = 'SPELLOL_PORT'
ENV_RELOAD = 'SPELLOL_RELOAD'   # '1' enables auto-reload for development

# API server
DEFAULT_HOST = '127.0.0.1'
DEFAULT_PORT = 8000
