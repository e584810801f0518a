"""Bidirectional word <-> identifier mapping."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional


def normalize_word(word: str) -> str:
    """Case-normalize a token before it enters or queries a vocabulary."""
    return word.lower()


class Vocabulary:
    """Append-only word index.

    Identifiers are assigned densely in first-seen order starting at 0 and
    never change once assigned. Words are stored exactly as given; callers
    normalize with :func:`normalize_word` beforehand.
    """

    def __init__(self, words: Optional[Iterable[str]] = None) -> None:
        self._index: Dict[str, int] = {}
        self._words: List[str] = []
        if words is not None:
            for word in words:
                self.insert_if_absent(word)

    def lookup(self, word: str) -> Optional[int]:
        """Return the identifier of ``word`` or ``None`` if it is unknown."""
        return self._index.get(word)

    def insert_if_absent(self, word: str) -> int:
        """Return the identifier of ``word``, assigning the next one if new."""
        idx = self._index.get(word)
        if idx is None:
            idx = len(self._words)
            self._index[word] = idx
            self._words.append(word)
        return idx

    def word_of(self, identifier: int) -> str:
        if not 0 <= identifier < len(self._words):
            raise IndexError(f"identifier {identifier} out of range [0, {len(self._words)})")
        return self._words[identifier]

    def __len__(self) -> int:
        return len(self._words)

    def __contains__(self, word: object) -> bool:
        return word in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._words)

    def __repr__(self) -> str:
        return f"Vocabulary(size={len(self)})"
