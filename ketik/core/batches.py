"""Word batch suppliers for the two game modes."""

from __future__ import annotations

import random
from typing import List, Optional, Sequence

from ketik.core.config import BATCH_SIZE


class SequentialBatchSupplier:
    """Hands out a finite pool in order; an empty batch means it is used up."""

    def __init__(self, words: Sequence[str], batch_size: int = BATCH_SIZE) -> None:
        self._words = list(words)
        self._batch_size = batch_size
        self._index = 0

    @property
    def exhausted(self) -> bool:
        return self._index >= len(self._words)

    def next_batch(self) -> List[str]:
        if self.exhausted:
            return []
        end = min(self._index + self._batch_size, len(self._words))
        batch = self._words[self._index:end]
        self._index = end
        return batch


class ShuffledBatchSupplier:
    """Reshuffles the same pool for every batch, so it never runs out."""

    def __init__(
        self,
        words: Sequence[str],
        batch_size: int = BATCH_SIZE,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._words = list(words)
        self._batch_size = batch_size
        self._rng = rng or random.Random()

    @property
    def exhausted(self) -> bool:
        return False

    def next_batch(self) -> List[str]:
        self._rng.shuffle(self._words)
        return self._words[: self._batch_size]


def parse_custom_text(text: str, min_words: int) -> List[str]:
    """Split user-provided practice text into words, keeping their order."""
    words = text.split()
    if len(words) < min_words:
        raise ValueError(f"Please enter at least {min_words} words (got {len(words)})")
    return words
