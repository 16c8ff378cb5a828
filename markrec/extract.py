# markrec/extract.py
"""
Page parsing for the listing and detail pages.

Everything that knows about the site's markup lives here; the pipeline only
deals in BeautifulSoup documents in and model objects out.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List

from bs4 import BeautifulSoup, Tag

from markrec.models import ItemRef, RecommendedItem, SourceItem

log = logging.getLogger(__name__)

TOTAL_SELECTOR = "#db-usr-profile > div.info > h1"
LISTING_LINK_SELECTOR = "div.item-show > div.title > a"

_NUM_RE = re.compile(r"\d+")


class PageFormatError(ValueError):
    """A page did not have the structure required to continue the run."""


@dataclass(frozen=True)
class Layout:
    """Where a detail page keeps the item name and its recommendation list."""

    name_selector: str
    recommendation_selector: str


LAYOUTS = {
    "book": Layout(
        name_selector="#wrapper > h1 > span",
        recommendation_selector="#db-rec-section > div > dl",
    ),
    "movie": Layout(
        name_selector="#content > h1 > span:nth-child(1)",
        recommendation_selector="#recommendations > div > dl",
    ),
}


def get_num(text: str) -> str:
    """Return the first run of decimal digits in `text`, or "" if there is none."""
    m = _NUM_RE.search(text or "")
    return m.group(0) if m else ""


def parse_rating(text: str | None) -> float:
    """
    Parse a rating like "8.7". Missing or non-numeric text yields 0.0.
    """
    if not text:
        return 0.0
    try:
        return float(text.strip())
    except ValueError:
        return 0.0


def _text(node: Tag | None) -> str:
    return node.get_text().strip() if node is not None else ""


# ---------- listing pages ----------


def extract_total(soup: BeautifulSoup) -> int:
    """Read the marked-item total from the profile header, e.g. "看过的电影(412)"."""
    header = soup.select_one(TOTAL_SELECTOR)
    if header is None:
        raise PageFormatError(f"no profile header ({TOTAL_SELECTOR}) on listing page")
    num = get_num(header.get_text())
    if not num:
        raise PageFormatError(f"no item count in profile header: {header.get_text()!r}")
    return int(num)


def extract_links(soup: BeautifulSoup) -> List[str]:
    """Return the detail-page links of one listing page, in document order."""
    result: List[str] = []
    for a in soup.select(LISTING_LINK_SELECTOR):
        href = a.get("href")
        # href="" has no detail page to fetch; dropped like a missing href.
        if href:
            result.append(str(href))
    return result


# ---------- detail pages ----------


def _extract_recommendation(dl: Tag) -> RecommendedItem | None:
    anchor = dl.select_one("dd > a")
    name = _text(anchor)
    if not name:
        return None
    link = anchor.get("href") if anchor is not None else None
    # An empty href would yield an item without an id.
    if not link:
        log.warning("failed to get link for《%s》", name)
        return None
    link = str(link)
    span = dl.select_one("dd > span")
    return RecommendedItem(
        id=get_num(link),
        name=name,
        link=link,
        rating=parse_rating(span.get_text() if span is not None else None),
    )


def extract_detail(
    soup: BeautifulSoup, link: str, media_type: str
) -> SourceItem | None:
    """
    Parse a detail page into the marked item and its recommended siblings.

    Returns None when the page has no recommendation entries. That covers both
    an unexpected page shape and an item that really has no recommendations;
    callers count it as no contribution.
    """
    layout = LAYOUTS[media_type]
    original_name = _text(soup.select_one(layout.name_selector))
    entries = soup.select(layout.recommendation_selector)

    if not entries:
        log.info(
            "get recommended %ss for《%s》failed, link: %s",
            media_type,
            original_name,
            link,
        )
        return None

    recommendations: List[RecommendedItem] = []
    for dl in entries:
        item = _extract_recommendation(dl)
        if item is not None:
            recommendations.append(item)

    return SourceItem(
        original=ItemRef(id=get_num(link), name=original_name, link=link),
        recommendations=recommendations,
    )
