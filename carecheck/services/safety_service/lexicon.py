"""Per-language keyword lexicons with atomic runtime replacement.

Readers never lock: they dereference the current mapping once and work on
that immutable snapshot. Writers build a complete new mapping and swap the
reference under a lock, so a concurrent reader sees either the old or the
new term list, never a partial one.
"""
import logging
import re
import threading
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from carecheck.shared.models import InvalidInput
from .config import (
    CATEGORY_KEYWORDS,
    CRISIS_KEYWORDS,
    CRISIS_PATTERNS,
    DEFAULT_LANGUAGE,
    NEGATIVE_KEYWORDS,
    POSITIVE_KEYWORDS,
    URGENCY_KEYWORDS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SentimentKeywords:
    positive: Tuple[str, ...] = ()
    negative: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Lexicon:
    """Keyword sets for one language.

    Immutable - updates produce a new Lexicon via ``dataclasses.replace``.
    """
    language: str
    crisis_keywords: Tuple[str, ...] = ()
    urgency_keywords: Tuple[str, ...] = ()
    sentiment_keywords: SentimentKeywords = field(default_factory=SentimentKeywords)
    category_keywords: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    crisis_patterns: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        return {
            "language": self.language,
            "crisisKeywords": list(self.crisis_keywords),
            "urgencyKeywords": list(self.urgency_keywords),
            "sentimentKeywords": {
                "positive": list(self.sentiment_keywords.positive),
                "negative": list(self.sentiment_keywords.negative),
            },
            "categoryKeywords": {
                name: list(terms) for name, terms in self.category_keywords.items()
            },
        }


def _freeze_categories(categories: Mapping[str, Iterable[str]]) -> Mapping[str, Tuple[str, ...]]:
    return MappingProxyType({name: tuple(terms) for name, terms in categories.items()})


def build_default_lexicons() -> Dict[str, Lexicon]:
    """Build the shipped lexicons. Non-English entries carry crisis terms only."""
    english = Lexicon(
        language=DEFAULT_LANGUAGE,
        crisis_keywords=CRISIS_KEYWORDS[DEFAULT_LANGUAGE],
        urgency_keywords=URGENCY_KEYWORDS,
        sentiment_keywords=SentimentKeywords(
            positive=POSITIVE_KEYWORDS,
            negative=NEGATIVE_KEYWORDS,
        ),
        category_keywords=_freeze_categories(CATEGORY_KEYWORDS),
        crisis_patterns=CRISIS_PATTERNS[DEFAULT_LANGUAGE],
    )
    lexicons = {DEFAULT_LANGUAGE: english}
    for language, keywords in CRISIS_KEYWORDS.items():
        if language != DEFAULT_LANGUAGE:
            lexicons[language] = Lexicon(language=language, crisis_keywords=keywords)
    return lexicons


class LexiconStore:
    """Process-wide store of per-language lexicons.

    ``get_lexicon`` never fails: unknown languages resolve to English and
    empty fields of a known language are filled from the English entry.
    """

    CATEGORIES = (
        "crisis_keywords",
        "urgency_keywords",
        "sentiment_keywords.positive",
        "sentiment_keywords.negative",
        "crisis_patterns",
    )
    CATEGORY_PREFIX = "category_keywords."

    def __init__(self, lexicons: Optional[Mapping[str, Lexicon]] = None):
        initial = dict(lexicons) if lexicons is not None else build_default_lexicons()
        if DEFAULT_LANGUAGE not in initial:
            raise ValueError(f"Lexicon store requires a '{DEFAULT_LANGUAGE}' entry")
        self._lexicons: Mapping[str, Lexicon] = MappingProxyType(initial)
        self._write_lock = threading.Lock()

        logger.info(
            "LEXICON_STORE_INITIALIZED",
            extra={
                "languages": sorted(initial),
                "crisis_keyword_count": len(initial[DEFAULT_LANGUAGE].crisis_keywords),
            }
        )

    def get_lexicon(self, language_code: Optional[str]) -> Lexicon:
        """Resolve the lexicon for a language, falling back to English."""
        snapshot = self._lexicons
        fallback = snapshot[DEFAULT_LANGUAGE]
        lexicon = snapshot.get(language_code or DEFAULT_LANGUAGE)
        if lexicon is None:
            return fallback
        if lexicon is fallback:
            return lexicon
        return self._fill_from(lexicon, fallback)

    def supported_languages(self) -> List[str]:
        return sorted(self._lexicons)

    def update_lexicon(self, language_code: str, category: str, terms: Iterable[str]) -> Lexicon:
        """Replace one term list for a language.

        Args:
            language_code: Language to update; created if absent
            category: One of ``CATEGORIES`` or ``category_keywords.<name>``
            terms: Complete replacement term list

        Returns:
            The stored (unfilled) lexicon for the language

        Raises:
            InvalidInput: Unknown category, empty language code or non-string terms
        """
        if not language_code or not isinstance(language_code, str):
            raise InvalidInput("language code is required", field="language_code")
        if isinstance(terms, str):
            raise InvalidInput("terms must be a list of strings", field="terms")
        new_terms = tuple(terms)
        if any(not isinstance(term, str) or not term.strip() for term in new_terms):
            raise InvalidInput("terms must be non-empty strings", field="terms")
        if category not in self.CATEGORIES and not (
            category.startswith(self.CATEGORY_PREFIX) and len(category) > len(self.CATEGORY_PREFIX)
        ):
            raise InvalidInput(f"unknown lexicon category '{category}'", field="category")
        if category == "crisis_patterns":
            for pattern in new_terms:
                try:
                    re.compile(pattern)
                except re.error as e:
                    raise InvalidInput(f"invalid pattern '{pattern}': {e}", field="terms") from e

        with self._write_lock:
            current = dict(self._lexicons)
            existing = current.get(language_code) or Lexicon(language=language_code)
            current[language_code] = self._with_terms(existing, category, new_terms)
            self._lexicons = MappingProxyType(current)

        logger.info(
            "LEXICON_UPDATED",
            extra={
                "language": language_code,
                "category": category,
                "term_count": len(new_terms),
            }
        )
        return current[language_code]

    def _with_terms(self, lexicon: Lexicon, category: str, terms: Tuple[str, ...]) -> Lexicon:
        if category == "crisis_keywords":
            return replace(lexicon, crisis_keywords=terms)
        if category == "urgency_keywords":
            return replace(lexicon, urgency_keywords=terms)
        if category == "crisis_patterns":
            return replace(lexicon, crisis_patterns=terms)
        if category == "sentiment_keywords.positive":
            return replace(lexicon, sentiment_keywords=replace(lexicon.sentiment_keywords, positive=terms))
        if category == "sentiment_keywords.negative":
            return replace(lexicon, sentiment_keywords=replace(lexicon.sentiment_keywords, negative=terms))

        name = category[len(self.CATEGORY_PREFIX):]
        categories = dict(lexicon.category_keywords)
        categories[name] = terms
        return replace(lexicon, category_keywords=_freeze_categories(categories))

    @staticmethod
    def _fill_from(lexicon: Lexicon, fallback: Lexicon) -> Lexicon:
        sentiment = SentimentKeywords(
            positive=lexicon.sentiment_keywords.positive or fallback.sentiment_keywords.positive,
            negative=lexicon.sentiment_keywords.negative or fallback.sentiment_keywords.negative,
        )
        return Lexicon(
            language=lexicon.language,
            crisis_keywords=lexicon.crisis_keywords or fallback.crisis_keywords,
            urgency_keywords=lexicon.urgency_keywords or fallback.urgency_keywords,
            sentiment_keywords=sentiment,
            category_keywords=lexicon.category_keywords or fallback.category_keywords,
            crisis_patterns=lexicon.crisis_patterns or fallback.crisis_patterns,
        )


_default_store: Optional[LexiconStore] = None
_default_store_lock = threading.Lock()


def get_default_store() -> LexiconStore:
    """Process-wide store shared by detectors built without an explicit one."""
    global _default_store
    if _default_store is None:
        with _default_store_lock:
            if _default_store is None:
                _default_store = LexiconStore()
    return _default_store


def get_lexicon(language_code: Optional[str]) -> Lexicon:
    return get_default_store().get_lexicon(language_code)


def update_lexicon(language_code: str, category: str, terms: Iterable[str]) -> Lexicon:
    return get_default_store().update_lexicon(language_code, category, terms)
