"""Abstract base classes for dependency injection.

Store methods raise core.errors.StoreError on failure. An empty list or
None always means "nothing matched", never "the call failed".
"""

from abc import ABC, abstractmethod
from datetime import datetime

from .models import ActiveEntry, CatalogWord


class CatalogStore(ABC):
    """Read access to the word catalog. Only narrated words are returned."""

    @abstractmethod
    def list_catalog_ids(self, difficulty: str) -> list:
        """Ids of all narrated words of a difficulty."""
        pass

    @abstractmethod
    def get_catalog_word(self, word_id) -> CatalogWord | None:
        """Look up a narrated word by id. Returns None if absent."""
        pass

    @abstractmethod
    def query_catalog(self, difficulty: str, syllable_min: int | None = None,
                      syllable_max: int | None = None) -> list[CatalogWord]:
        """All narrated words of a difficulty within an inclusive syllable band."""
        pass

    @abstractmethod
    def seed_catalog(self, words: list[dict]) -> int:
        """Load catalog words ({word, narration_asset, syllable_count, difficulty}).
        Words already present are updated. Returns the number of words written."""
        pass


class ActiveSetStore(ABC):
    """Read/write access to the active daily set."""

    @abstractmethod
    def exists_in_active_set(self, word: str) -> bool:
        """Check if a word is already in the active set."""
        pass

    @abstractmethod
    def query_oldest_active(self, difficulty: str, syllable_min: int | None = None,
                            syllable_max: int | None = None) -> ActiveEntry | None:
        """Entry with the smallest created_at matching the filter, or None."""
        pass

    @abstractmethod
    def touch_active_entry(self, entry_id, created_at: datetime) -> bool:
        """Set an entry's created_at. Returns False if the entry no longer exists."""
        pass

    @abstractmethod
    def insert_active_entry(self, entry: ActiveEntry) -> ActiveEntry:
        """Insert an entry and return it with its id set.
        Raises DuplicateWordError if the word is already active."""
        pass

    @abstractmethod
    def list_active_entries(self, difficulty: str | None = None) -> list[ActiveEntry]:
        """Active entries, oldest first."""
        pass

    @abstractmethod
    def delete_active_entries_before(self, cutoff: datetime) -> int:
        """Delete entries created before cutoff. Returns the number deleted."""
        pass
