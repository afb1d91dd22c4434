"""Exceptions raised by storage backends."""


class StoreError(Exception):
    """A catalog or active-set store call failed.

    Raised instead of returning an empty result, so callers can tell
    "no rows matched" apart from "the query did not run".
    """


class DuplicateWordError(StoreError):
    """Insert rejected because the word is already in the active set."""

    def __init__(self, word: str):
        super().__init__(f"Word already in active set: {word}")
        self.word = word
