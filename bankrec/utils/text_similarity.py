"""
Text similarity between statement descriptions and transaction details.
Used for descriptive scoring only; never affects match selection.
"""

import re
from typing import Optional

from rapidfuzz import fuzz

_NON_WORD = re.compile(r"[^\w\s]")


def normalize_text(text: Optional[str]) -> str:
    """Lowercase, strip punctuation and collapse whitespace."""
    if not text:
        return ""
    return " ".join(_NON_WORD.sub(" ", text.lower()).split())


class TextSimilarityEngine:
    """Fuzzy comparison of free-text fields."""

    def __init__(self, min_length: int = 3):
        self.min_length = min_length

    def similarity(self, text1: Optional[str], text2: Optional[str]) -> float:
        """Token-set similarity in [0, 1]."""
        s1 = normalize_text(text1)
        s2 = normalize_text(text2)

        if not s1 or not s2:
            return 0.0
        if s1 == s2:
            return 1.0
        if len(s1) < self.min_length or len(s2) < self.min_length:
            return 0.0

        return fuzz.token_set_ratio(s1, s2) / 100.0

    def mentions(self, text: Optional[str], name: Optional[str]) -> bool:
        """Whether `name` appears (fuzzily) inside `text`."""
        haystack = normalize_text(text)
        needle = normalize_text(name)
        if len(needle) < self.min_length or not haystack:
            return False
        if needle in haystack:
            return True
        return fuzz.partial_ratio(needle, haystack) >= 90

    def compare(
        self,
        statement_description: Optional[str],
        transaction_description: Optional[str],
        counterparty_name: Optional[str] = None,
    ) -> float:
        """
        Combined similarity between a statement line and a transaction.
        Averages the available signals.
        """
        scores = []

        if statement_description and transaction_description:
            scores.append(self.similarity(statement_description, transaction_description))

        if statement_description and counterparty_name:
            if self.mentions(statement_description, counterparty_name):
                scores.append(1.0)
            else:
                scores.append(
                    fuzz.token_sort_ratio(
                        normalize_text(statement_description),
                        normalize_text(counterparty_name),
                    ) / 100.0
                )

        if not scores:
            return 0.0

        return sum(scores) / len(scores)
