"""Random word selection for the daily rotation."""

import logging
import random

from .config import MAX_SAMPLE_ATTEMPTS, STRATEGY_IDS
from .evictor import ActiveSetEvictor
from .interfaces import ActiveSetStore, CatalogStore
from .models import CatalogWord, RotationRequest

logger = logging.getLogger(__name__)


class WordSampler:
    """Draws words from the catalog that are not already in the active set.

    Falling short is a normal outcome: the sampler returns what it found and
    asks the evictor to refresh the oldest active entry for the filter.
    """

    def __init__(self, catalog: CatalogStore, active_set: ActiveSetStore,
                 evictor: ActiveSetEvictor, rng: random.Random = None,
                 max_attempts: int = MAX_SAMPLE_ATTEMPTS):
        self.catalog = catalog
        self.active_set = active_set
        self.evictor = evictor
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts

    def sample(self, request: RotationRequest) -> list[CatalogWord]:
        """Run a scheduled request with its configured strategy."""
        if request.strategy == STRATEGY_IDS:
            return self.fetch_random_words_by_difficulty(request.difficulty, request.count)
        return self.fetch_words(request.difficulty, request.count,
                                request.syllable_min, request.syllable_max)

    def fetch_random_words_by_difficulty(self, difficulty: str, count: int) -> list[CatalogWord]:
        """Sample from the id pool without replacement, fetching records one at a time.

        Every draw consumes an id, so the loop runs at most len(pool) times.
        The evictor only fires when nothing at all was accepted.
        """
        pool = list(self.catalog.list_catalog_ids(difficulty))
        pool_size = len(pool)
        words = []
        while len(words) < count and pool:
            word_id = pool.pop(self.rng.randrange(len(pool)))
            word = self.catalog.get_catalog_word(word_id)
            if word is None:
                continue
            if self.active_set.exists_in_active_set(word.word):
                continue
            words.append(word)

        if not words:
            logger.warning(f"No fresh {difficulty} words in pool of {pool_size}")
            self.evictor.update_oldest_word_created_at(difficulty)
        elif len(words) < count:
            logger.warning(f"Only {len(words)}/{count} fresh {difficulty} words available")

        return words

    def fetch_words(self, difficulty: str, count: int, syllable_min: int | None = None,
                    syllable_max: int | None = None) -> list[CatalogWord]:
        """Sample full records in memory with a bounded number of draws.

        Rejected words stay in the working set and may be drawn again, so
        the attempt limit is what ends the loop.
        """
        candidates = list(self.catalog.query_catalog(difficulty, syllable_min, syllable_max))
        selected = []
        attempts = 0
        while len(selected) < count and attempts < self.max_attempts and candidates:
            index = self.rng.randrange(len(candidates))
            word = candidates[index]
            if not self.active_set.exists_in_active_set(word.word):
                selected.append(word)
                candidates.pop(index)
            attempts += 1

        if len(selected) < count:
            logger.warning(f"Only {len(selected)}/{count} fresh {difficulty} words "
                           f"[{syllable_min}-{syllable_max}] after {attempts} attempts")
            self.evictor.update_oldest_word_created_at(difficulty, syllable_min, syllable_max)

        return selected[:count]
