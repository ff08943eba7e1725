"""
Customer matching
Detects near-duplicate customer names for merge suggestions

Strategies:
1. Normalised comparison (case, whitespace, punctuation, Ltd/Limited...)
2. Substring containment (one name contains the other)
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Set, Tuple

SAME_NAME_REASON = "Same name (different formatting)"
SIMILAR_NAME_REASON = "Similar names"

# Minimum normalised length before containment counts as a match
MIN_CONTAINMENT_LENGTH = 3

# Common UK business suffixes that should be treated as equivalent
SUFFIX_PATTERNS: Tuple[Tuple["re.Pattern[str]", str], ...] = (
    (re.compile(r"\blimited\b"), "ltd"),
    (re.compile(r"\bltd\b\.?"), "ltd"),
    (re.compile(r"\bp\.?l\.?c\b\.?"), "plc"),
    (re.compile(r"\bl\.?l\.?p\b\.?"), "llp"),
    (re.compile(r"\bincorporated\b"), "inc"),
    (re.compile(r"\binc\b\.?"), "inc"),
)

PUNCTUATION_RE = re.compile(r"[^\w\s]")
WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class MergeSuggestion:
    """Two customer names that might be the same customer"""
    name_a: str
    name_b: str
    reason: str


def normalise_customer_name(name: str) -> str:
    """
    Normalise a customer name for comparison

    "ABC Limited", "abc ltd." and " ABC  Ltd " all become "abc ltd".
    """
    normalised = (name or "").lower().strip().replace("&", " and ")
    for pattern, replacement in SUFFIX_PATTERNS:
        normalised = pattern.sub(replacement, normalised)
    normalised = PUNCTUATION_RE.sub("", normalised)
    return WHITESPACE_RE.sub(" ", normalised).strip()


def _distinct(names: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    distinct: List[str] = []
    for name in names:
        if name not in seen:
            seen.add(name)
            distinct.append(name)
    return distinct


def find_duplicate_customers(names: Iterable[str]) -> List[MergeSuggestion]:
    """
    Find potential duplicate customers in a list of names

    Each unordered pair is reported at most once, in input order.
    Customer lists are small, so the pairwise scan is fine.
    """
    candidates = _distinct(names)
    normalised = [normalise_customer_name(name) for name in candidates]
    suggestions: List[MergeSuggestion] = []

    for i in range(len(candidates)):
        for j in range(i + 1, len(candidates)):
            norm_a, norm_b = normalised[i], normalised[j]
            if not norm_a or not norm_b:
                continue

            if norm_a == norm_b:
                suggestions.append(
                    MergeSuggestion(candidates[i], candidates[j], SAME_NAME_REASON)
                )
                continue

            if (
                len(norm_a) > MIN_CONTAINMENT_LENGTH
                and len(norm_b) > MIN_CONTAINMENT_LENGTH
                and (norm_a in norm_b or norm_b in norm_a)
            ):
                suggestions.append(
                    MergeSuggestion(candidates[i], candidates[j], SIMILAR_NAME_REASON)
                )

    return suggestions
