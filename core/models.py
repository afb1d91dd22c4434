"""Domain models for spellol daily rotation."""

from datetime import datetime

from .config import DIFFICULTIES, STRATEGIES, STRATEGY_FULL, STRATEGY_IDS
from .utils import format_timestamp, parse_timestamp


class CatalogWord:
    """A word in the catalog, eligible once it has a narration asset."""

    def __init__(self, id, word: str, narration_asset: str | None,
                 syllable_count: int, difficulty: str):
        self.id = id
        self.word = word
        self.narration_asset = narration_asset
        self.syllable_count = syllable_count
        self.difficulty = difficulty

    @property
    def has_narration(self) -> bool:
        return self.narration_asset is not None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'word': self.word,
            'narration_asset': self.narration_asset,
            'syllable_count': self.syllable_count,
            'difficulty': self.difficulty
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CatalogWord':
        return cls(
            data.get('id'),
            data['word'],
            data.get('narration_asset'),
            int(data['syllable_count']),
            data['difficulty']
        )

    def __eq__(self, other):
        if not isinstance(other, CatalogWord):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash((self.id, self.word))

    def __repr__(self):
        return f"CatalogWord({self.word!r}, {self.difficulty}, {self.syllable_count} syllables)"


class ActiveEntry:
    """A word in the active daily set. created_at orders eviction."""

    def __init__(self, word: str, narration_asset: str | None, syllable_count: int,
                 difficulty: str, created_at: datetime, id=None):
        self.id = id
        self.word = word
        self.narration_asset = narration_asset
        self.syllable_count = syllable_count
        self.difficulty = difficulty
        self.created_at = created_at

    @classmethod
    def from_catalog_word(cls, word: CatalogWord, created_at: datetime) -> 'ActiveEntry':
        """Copy a selected catalog word into a new, unsaved entry."""
        return cls(word.word, word.narration_asset, word.syllable_count,
                   word.difficulty, created_at)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'word': self.word,
            'narration_asset': self.narration_asset,
            'syllable_count': self.syllable_count,
            'difficulty': self.difficulty,
            'created_at': format_timestamp(self.created_at)
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ActiveEntry':
        return cls(
            data['word'],
            data.get('narration_asset'),
            int(data['syllable_count']),
            data['difficulty'],
            parse_timestamp(data['created_at']),
            id=data.get('id')
        )

    def __repr__(self):
        return f"ActiveEntry({self.id!r}, {self.word!r}, created_at={format_timestamp(self.created_at)})"


class RotationRequest:
    """One entry of the rotation schedule."""

    def __init__(self, difficulty: str, count: int, strategy: str = STRATEGY_IDS,
                 syllable_min: int | None = None, syllable_max: int | None = None):
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {difficulty!r}")
        if count < 1:
            raise ValueError(f"Count must be at least 1, got {count}")
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy: {strategy!r}")
        if syllable_min is not None and syllable_max is not None and syllable_min > syllable_max:
            raise ValueError(f"Empty syllable band: {syllable_min}-{syllable_max}")
        if strategy == STRATEGY_IDS and (syllable_min is not None or syllable_max is not None):
            raise ValueError("Syllable bands require the 'full' strategy")
        self.difficulty = difficulty
        self.count = count
        self.strategy = strategy
        self.syllable_min = syllable_min
        self.syllable_max = syllable_max

    @property
    def label(self) -> str:
        """Short human-readable name, e.g. 'difficult[3-4]'."""
        if self.syllable_min is None and self.syllable_max is None:
            return self.difficulty
        low = '' if self.syllable_min is None else self.syllable_min
        high = '' if self.syllable_max is None else self.syllable_max
        return f"{self.difficulty}[{low}-{high}]"

    def to_dict(self) -> dict:
        return {
            'difficulty': self.difficulty,
            'count': self.count,
            'strategy': self.strategy,
            'syllable_min': self.syllable_min,
            'syllable_max': self.syllable_max
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'RotationRequest':
        syllable_min = data.get('syllable_min', data.get('syllableMin'))
        syllable_max = data.get('syllable_max', data.get('syllableMax'))
        has_band = syllable_min is not None or syllable_max is not None
        default_strategy = STRATEGY_FULL if has_band else STRATEGY_IDS
        return cls(
            data['difficulty'],
            int(data['count']),
            data.get('strategy', default_strategy),
            None if syllable_min is None else int(syllable_min),
            None if syllable_max is None else int(syllable_max)
        )

    def __eq__(self, other):
        if not isinstance(other, RotationRequest):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"RotationRequest({self.label}, count={self.count}, strategy={self.strategy})"


class RequestOutcome:
    """What happened for a single scheduled request."""

    def __init__(self, request: RotationRequest):
        self.request = request
        self.selected = []   # CatalogWords returned by the sampler
        self.error = None    # str when the request failed on a store error

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def shortfall(self) -> int:
        return max(0, self.request.count - len(self.selected))

    def to_dict(self) -> dict:
        return {
            'request': self.request.to_dict(),
            'selected': [w.word for w in self.selected],
            'shortfall': self.shortfall,
            'error': self.error
        }


class RotationReport:
    """Summary of one rotation run."""

    def __init__(self):
        self.outcomes = []
        self.inserted = []    # words written to the active set
        self.duplicates = []  # words rejected by the active set's unique constraint
        self.insert_errors = {}  # word -> error message

    @property
    def selected_words(self) -> list[CatalogWord]:
        """All selected words, concatenated in request order."""
        words = []
        for outcome in self.outcomes:
            words.extend(outcome.selected)
        return words

    @property
    def requested(self) -> int:
        return sum(o.request.count for o in self.outcomes)

    @property
    def failed_requests(self) -> list[RequestOutcome]:
        return [o for o in self.outcomes if o.failed]

    def to_dict(self) -> dict:
        return {
            'requested': self.requested,
            'selected': len(self.selected_words),
            'inserted': list(self.inserted),
            'duplicates': list(self.duplicates),
            'insert_errors': dict(self.insert_errors),
            'outcomes': [o.to_dict() for o in self.outcomes]
        }
