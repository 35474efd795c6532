"""
Client-side keyword search over an already-fetched list of articles.

Everything here is a pure function of its inputs: no I/O, no caching, no
module-level state.  The list and the query a client is holding are
passed in explicitly as a ``SearchState``.

Matching is a plain case-insensitive substring test (no ranking).  The
same compiled pattern drives both filtering and highlighting, so an
article is retained exactly when at least one highlight would be produced
in one of its searchable fields.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Iterable, NamedTuple, Optional, Protocol, Sequence


class Searchable(Protocol):
    title: str
    content: str
    excerpt: Optional[str]
    slug: str


class Segment(NamedTuple):
    text: str
    is_match: bool


def is_blank(query: str | None) -> bool:
    return not query or not query.strip()


def _compile(query: str) -> re.Pattern[str]:
    return re.compile(re.escape(query), re.IGNORECASE)


def _searchable_fields(article: Searchable) -> Iterable[str]:
    yield article.title
    yield article.content
    if article.excerpt is not None:
        yield article.excerpt
    yield article.slug


def _matches(article: Searchable, pattern: re.Pattern[str]) -> bool:
    return any(pattern.search(text) for text in _searchable_fields(article))


def matches(article: Searchable, query: str) -> bool:
    """True if *query* occurs in the title, content, excerpt or slug."""
    if is_blank(query):
        return True
    return _matches(article, _compile(query))


def filter_articles(articles: Iterable[Searchable], query: str) -> list:
    """
    Keep the articles that match *query*, in input order.

    A blank query keeps everything.
    """
    if is_blank(query):
        return list(articles)
    pattern = _compile(query)
    return [a for a in articles if _matches(a, pattern)]


def _split(text: str, pattern: re.Pattern[str]) -> list[Segment]:
    segments: list[Segment] = []
    pos = 0
    for m in pattern.finditer(text):
        if m.start() > pos:
            segments.append(Segment(text[pos:m.start()], False))
        # m.group() is the original text, so casing is preserved.
        segments.append(Segment(m.group(), True))
        pos = m.end()
    if pos < len(text):
        segments.append(Segment(text[pos:], False))
    return segments


def highlight(text: str, query: str) -> list[Segment]:
    """
    Split *text* around every case-insensitive occurrence of *query*.

    ``"".join(s.text for s in highlight(text, query)) == text`` holds for
    every input.  An empty *text* yields no segments; a blank query yields
    the whole text as one unmatched segment.
    """
    if not text:
        return []
    if is_blank(query):
        return [Segment(text, False)]
    return _split(text, _compile(query))


# ---------------------------------------------------------------------------
# Search state and results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SearchState:
    """What the client is holding: the fetched articles and the typed query."""

    articles: tuple = ()
    query: str = ""

    @classmethod
    def of(cls, articles: Iterable[Searchable], query: str = "") -> "SearchState":
        return cls(tuple(articles), query)

    def with_query(self, query: str) -> "SearchState":
        return replace(self, query=query)

    def with_articles(self, articles: Iterable[Searchable]) -> "SearchState":
        return replace(self, articles=tuple(articles))

    def cleared(self) -> "SearchState":
        return replace(self, query="")


@dataclass(frozen=True)
class SearchHit:
    """A retained article plus highlighted versions of its displayed fields."""

    article: Searchable
    title: tuple[Segment, ...]
    excerpt: Optional[tuple[Segment, ...]]
    slug: tuple[Segment, ...]


def _hit(article: Searchable, pattern: Optional[re.Pattern[str]]) -> SearchHit:
    def mark(text: str) -> tuple[Segment, ...]:
        if not text:
            return ()
        if pattern is None:
            return (Segment(text, False),)
        return tuple(_split(text, pattern))

    return SearchHit(
        article=article,
        title=mark(article.title),
        excerpt=mark(article.excerpt) if article.excerpt is not None else None,
        slug=mark(article.slug),
    )


def search(state: SearchState) -> list[SearchHit]:
    """Filter ``state.articles`` by ``state.query`` and highlight each hit."""
    if is_blank(state.query):
        return [_hit(a, None) for a in state.articles]
    pattern = _compile(state.query)
    return [_hit(a, pattern) for a in state.articles if _matches(a, pattern)]


def render(segments: Sequence[Segment], open_mark: str = "[", close_mark: str = "]") -> str:
    """Join *segments* back into text, wrapping matched spans in markers."""
    return "".join(
        f"{open_mark}{s.text}{close_mark}" if s.is_match else s.text for s in segments
    )
