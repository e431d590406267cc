"""Keyword and pattern matching primitives.

Both matchers are pure functions over their inputs. Keyword matching is
plain case-insensitive substring containment: "die" also matches inside
"diesel". Pattern matching counts distinct regexes, not occurrences.
"""
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, List, Sequence, Tuple


@dataclass(frozen=True)
class KeywordMatch:
    """Outcome of a keyword scan. ``matched`` follows lexicon order."""
    count: int
    matched: Tuple[str, ...] = ()


def match_keywords(text: str, keywords: Iterable[str]) -> KeywordMatch:
    """Count lexicon keywords contained in ``text``.

    Args:
        text: Raw user text
        keywords: Lexicon terms, in lexicon order

    Returns:
        KeywordMatch with the number of distinct terms found
    """
    normalized_text = text.lower()
    matched: List[str] = []
    for keyword in keywords:
        if keyword and keyword.lower() in normalized_text:
            matched.append(keyword)
    return KeywordMatch(count=len(matched), matched=tuple(matched))


@lru_cache(maxsize=256)
def _compile(pattern: str) -> "re.Pattern[str]":
    return re.compile(pattern, re.IGNORECASE)


def compile_patterns(patterns: Sequence[str]) -> List["re.Pattern[str]"]:
    """Compile pattern strings case-insensitively, caching by source."""
    return [_compile(pattern) for pattern in patterns]


def match_patterns(text: str, patterns: Sequence[str]) -> int:
    """Count how many distinct patterns match the raw text."""
    return sum(1 for pattern in compile_patterns(patterns) if pattern.search(text))
