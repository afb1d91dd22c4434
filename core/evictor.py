"""Pushing the oldest active word to the back of the rotation."""

import logging
from datetime import datetime
from typing import Callable

from .interfaces import ActiveSetStore
from .utils import utc_now

logger = logging.getLogger(__name__)


class ActiveSetEvictor:
    """Refreshes the least-recently-refreshed entry of the active set.

    The entry is not removed. Stamping it with the current time marks it
    for the external expiry process and moves it behind every other entry
    in eviction order.
    """

    def __init__(self, active_set: ActiveSetStore, now: Callable[[], datetime] = utc_now):
        self.active_set = active_set
        self.now = now

    def update_oldest_word_created_at(self, difficulty: str, syllable_min: int | None = None,
                                      syllable_max: int | None = None) -> bool | None:
        """Touch the oldest entry matching the filter.

        Returns the result of the update, or None if nothing matched.
        """
        oldest = self.active_set.query_oldest_active(difficulty, syllable_min, syllable_max)
        if oldest is None:
            logger.info(f"No active entry to refresh for {difficulty} "
                        f"[{syllable_min}-{syllable_max}]")
            return None

        updated = self.active_set.touch_active_entry(oldest.id, self.now())
        if updated:
            logger.info(f"Refreshed oldest active word '{oldest.word}' ({difficulty})")
        else:
            logger.warning(f"Active entry {oldest.id} vanished before refresh")
        return updated
