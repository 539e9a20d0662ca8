"""Trigram name matcher used for "did you mean" suggestions.

Names are lower-cased and padded (two leading spaces, one trailing) before
being split into overlapping three-character grams, so short names and word
starts still produce useful overlap.  Similarity between two strings is the
number of shared trigrams divided by the size of their union, giving a value
between 0.0 and 1.0.

Typical usage::

    matcher = NameMatcher(["api", "frontend", "docs"])
    matcher.closest("fronted")    # "frontend"
    matcher.search("ap")          # [("api", 0.4), ...]
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Optional


def trigrams(text: str) -> Counter:
    """Return the multiset of padded trigrams in *text*."""
    padded = f"  {text.lower()} "
    return Counter(padded[i : i + 3] for i in range(len(padded) - 2))


def similarity(left: Counter, right: Counter) -> float:
    """Shared trigrams over the union of trigrams of two gram multisets."""
    shared = sum((left & right).values())
    union = sum((left | right).values())
    if union == 0:
        return 0.0
    return shared / union


class NameMatcher:
    """An in-memory trigram index over a set of names."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._index: dict[str, Counter] = {}
        for name in names:
            self.add(name)

    def add(self, name: str) -> None:
        self._index[name] = trigrams(name)

    def __len__(self) -> int:
        return len(self._index)

    def search(self, query: str, threshold: float = 0.0) -> list[tuple[str, float]]:
        """Return ``(name, score)`` pairs scoring at least *threshold*.

        Results are ordered best first; equal scores are ordered by name.
        """
        query_grams = trigrams(query)
        results = []
        for name, grams in self._index.items():
            score = similarity(query_grams, grams)
            if score >= threshold:
                results.append((name, score))
        results.sort(key=lambda item: (-item[1], item[0]))
        return results

    def closest(self, query: str, threshold: float = 0.0) -> Optional[str]:
        """Return the best matching name, or *None* when nothing qualifies."""
        results = self.search(query, threshold)
        if not results:
            return None
        return results[0][0]
