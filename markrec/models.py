# Defines the data structures shared by the extractors, the pipeline and the ranker.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass(frozen=True)
class ItemRef:
    """An item on the site. Identity is `id`, the numeric part of `link`."""

    id: str
    name: str
    link: str


@dataclass(frozen=True)
class RecommendedItem(ItemRef):
    """
    A sibling item listed in some detail page's recommendation section.

    `relevance` and `source_names` are not scraped; they stay empty at parse
    time and are filled in by the ranker.
    """

    rating: float = 0.0
    relevance: int = 0
    source_names: Tuple[str, ...] = ()


@dataclass
class SourceItem:
    """One fetched detail page: the marked item and what it recommends."""

    original: ItemRef
    recommendations: List[RecommendedItem] = field(default_factory=list)


@dataclass
class Result:
    """The final result of a recommend() run."""

    media_type: str
    marked_links: int
    analysed: int
    items: List[RecommendedItem] = field(default_factory=list)
