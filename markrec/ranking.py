# Aggregates the recommendations of every analysed item into one ranked list.

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import Dict, Iterable, List

from markrec.config import Settings
from markrec.models import RecommendedItem, SourceItem


def build_relationships(sources: Iterable[SourceItem]) -> Dict[str, List[str]]:
    """Map each recommended id to the "《name》" of every item that listed it."""
    relationships: Dict[str, List[str]] = {}
    for source in sources:
        name = f"《{source.original.name}》"
        for rec in source.recommendations:
            relationships.setdefault(rec.id, []).append(name)
    return relationships


def _sort(items: List[RecommendedItem], sort_by: str) -> List[RecommendedItem]:
    if sort_by == "rate":
        return sorted(items, key=lambda m: (-m.rating, -m.relevance))
    if sort_by == "relevance":
        return sorted(items, key=lambda m: (-m.relevance, -m.rating))
    return items


def build_result(
    sources: List[SourceItem],
    settings: Settings,
    marked_ids: Iterable[str] = (),
) -> List[RecommendedItem]:
    """
    Merge, score, filter and sort the recommendations of `sources`.

    relevance counts every listing of an id, so an item listed twice by the
    same page counts twice. The first listing's name, link and rating are
    kept. Items the user already marked (the originals of `sources` plus
    `marked_ids`) are dropped, as is anything not strictly above
    settings.min_mention and settings.min_score.
    """
    flattened = [rec for source in sources for rec in source.recommendations]

    # Remove duplicates; dicts keep first-seen order.
    canonical: Dict[str, RecommendedItem] = {}
    for rec in flattened:
        canonical.setdefault(rec.id, rec)

    relevance = Counter(rec.id for rec in flattened)
    relationships = build_relationships(sources)

    excluded = {source.original.id for source in sources}
    excluded.update(marked_ids)

    items = [
        replace(
            rec,
            relevance=relevance[rec_id],
            source_names=tuple(relationships.get(rec_id, ())),
        )
        for rec_id, rec in canonical.items()
    ]
    items = [
        m
        for m in items
        if m.relevance > settings.min_mention
        and m.rating > settings.min_score
        and m.id not in excluded
    ]
    return _sort(items, settings.sort_by)
