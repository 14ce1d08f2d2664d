"""
Text helpers shared by the article lifecycle: slugs and reading statistics.
"""

import math
import re
import unicodedata
from collections.abc import Callable
from dataclasses import dataclass

from bs4 import BeautifulSoup

DEFAULT_SLUG_FALLBACK = "article"
DEFAULT_WORDS_PER_MINUTE = 200

# Path segments under /articles/ that belong to author routes
RESERVED_SLUGS = frozenset({"create"})


def slugify(text: str) -> str:
    """Create URL-safe slug from text."""
    # Fold accents to ASCII before dropping everything else
    normalized = unicodedata.normalize("NFKD", text)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")

    slug = ascii_text.lower().strip()
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    return slug.strip("-")


def probe_unique_slug(
    base: str,
    is_taken: Callable[[str], bool],
    fallback: str = DEFAULT_SLUG_FALLBACK,
    reserved: frozenset[str] = RESERVED_SLUGS,
) -> str:
    """
    Return the first free candidate of base, base-1, base-2, ...

    `is_taken` must already exclude the article being named. Reserved
    candidates are skipped as if taken.
    """
    base = base or fallback
    candidate = base
    counter = 1
    while candidate in reserved or is_taken(candidate):
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate


@dataclass(frozen=True)
class WordStats:
    word_count: int
    reading_time: int


def strip_markup(content: str) -> str:
    """Return the visible text of an HTML fragment."""
    return BeautifulSoup(content, "html.parser").get_text(" ")


def compute_word_stats(
    content: str | None,
    words_per_minute: int = DEFAULT_WORDS_PER_MINUTE,
) -> WordStats:
    """
    Word count and reading time (minutes) for HTML content.

    Reading time is at least 1 once any content exists, 0 for empty content.
    """
    if not content:
        return WordStats(word_count=0, reading_time=0)

    words = len(strip_markup(content).split())
    minutes = max(1, math.ceil(words / words_per_minute))
    return WordStats(word_count=words, reading_time=minutes)
