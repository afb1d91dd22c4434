"""Loading the rotation schedule."""

import json
import logging
import os

from .config import DEFAULT_SCHEDULE, ENV_SCHEDULE_FILE
from .models import RotationRequest

logger = logging.getLogger(__name__)


def parse_schedule(entries: list[dict]) -> list[RotationRequest]:
    """Build requests from a list of dicts. Raises ValueError on a bad entry."""
    if not isinstance(entries, list):
        raise ValueError("Schedule must be a list of requests")
    requests = []
    for i, entry in enumerate(entries):
        try:
            requests.append(RotationRequest.from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid schedule entry {i}: {e}") from e
    return requests


def load_schedule(path: str | None = None) -> list[RotationRequest]:
    """Load the schedule from a JSON file, falling back to the default.

    The path defaults to $SPELLOL_SCHEDULE_FILE when set.
    """
    path = path or os.environ.get(ENV_SCHEDULE_FILE)
    if not path:
        return parse_schedule(DEFAULT_SCHEDULE)
    with open(path, 'r') as f:
        entries = json.load(f)
    logger.info(f"Loaded rotation schedule from {path}")
    return parse_schedule(entries)
