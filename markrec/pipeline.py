# markrec/pipeline.py
"""
The two-stage fetch pipeline.

Stage 1 reads the marked-item total, then fetches every listing page
concurrently to collect detail-page links. Stage 2 fetches every detail page
concurrently and parses it into a SourceItem.

Both stages fan out one task per unit of work through gather_all(), which
collects exactly one outcome per task before returning. Nothing downstream
runs until a stage has been fully collected.

Failure policy:
  - FetchError / PageFormatError while reading the total or a listing page
    propagates and ends the run.
  - FetchError on a single detail page is logged and counted as "no result".
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, List, Optional, TypeVar

from markrec.config import Settings
from markrec.extract import extract_detail, extract_links, extract_total
from markrec.fetcher import FetchError, PageFetcher
from markrec.models import SourceItem

log = logging.getLogger(__name__)

PAGE_SIZE = 30

T = TypeVar("T")
R = TypeVar("R")


# ---------- pagination arithmetic ----------


def max_start(total: int) -> int:
    """Offset of the last listing page for `total` marked items."""
    if total <= PAGE_SIZE:
        return 0
    if total % PAGE_SIZE != 0:
        return total - total % PAGE_SIZE
    return total - PAGE_SIZE


def compute_offsets(total: int) -> List[int]:
    return list(range(0, max_start(total) + 1, PAGE_SIZE))


# ---------- scatter / gather ----------


@dataclass
class _Outcome:
    result: Any = None
    error: Optional[BaseException] = None


async def gather_all(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[R]],
    max_concurrency: int = 0,
) -> List[R]:
    """
    Run `worker` once per item and return every result in completion order.

    Each task posts exactly one outcome to a queue sized to the task count and
    the collector drains exactly that many, so None results are returned too.
    An exception raised by a worker is re-raised here as soon as it is drained;
    the remaining tasks are cancelled.

    `max_concurrency` > 0 caps the number of workers running at once.
    """
    items = list(items)
    if not items:
        return []

    queue: asyncio.Queue[_Outcome] = asyncio.Queue(maxsize=len(items))
    sem = asyncio.Semaphore(max_concurrency) if max_concurrency > 0 else None

    async def run_one(item: T) -> None:
        try:
            if sem is None:
                result = await worker(item)
            else:
                async with sem:
                    result = await worker(item)
        except Exception as e:
            await queue.put(_Outcome(error=e))
        else:
            await queue.put(_Outcome(result=result))

    tasks = [asyncio.create_task(run_one(item)) for item in items]
    results: List[R] = []
    try:
        for _ in range(len(tasks)):
            outcome = await queue.get()
            if outcome.error is not None:
                raise outcome.error
            results.append(outcome.result)
    finally:
        pending = [t for t in tasks if not t.done()]
        for t in pending:
            t.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    return results


# ---------- stage 1: listing pages ----------


async def fetch_total(fetcher: PageFetcher, settings: Settings) -> int:
    soup = await fetcher.fetch_soup(settings.listing_url(0), use_cookie=True)
    total = extract_total(soup)
    log.debug("Profile reports %d marked %ss", total, settings.media_type)
    return total


async def fetch_listing_links(
    fetcher: PageFetcher, settings: Settings, start: int
) -> List[str]:
    soup = await fetcher.fetch_soup(settings.listing_url(start), use_cookie=True)
    links = extract_links(soup)
    log.debug("Listing page start=%d yielded %d links", start, len(links))
    return links


async def prepare_links(fetcher: PageFetcher, settings: Settings) -> List[str]:
    """Discover the detail-page link of every marked item."""
    total = await fetch_total(fetcher, settings)
    offsets = compute_offsets(total)

    async def worker(start: int) -> List[str]:
        return await fetch_listing_links(fetcher, settings, start)

    pages = await gather_all(offsets, worker, settings.max_concurrency)

    links: List[str] = []
    for page in pages:
        links.extend(page)

    log.info("successfully got %d %ss you've marked", len(links), settings.media_type)
    return links


# ---------- stage 2: detail pages ----------


async def fetch_source(
    fetcher: PageFetcher, settings: Settings, link: str
) -> SourceItem | None:
    """Fetch and parse one detail page. Any FetchError becomes None."""
    try:
        soup = await fetcher.fetch_soup(link, use_cookie=False)
    except FetchError as e:
        log.warning("skipping %s: %s", link, e)
        return None
    return extract_detail(soup, link, settings.media_type)


async def fetch_sources(
    fetcher: PageFetcher, settings: Settings, links: List[str]
) -> List[SourceItem]:
    async def worker(link: str) -> SourceItem | None:
        return await fetch_source(fetcher, settings, link)

    outcomes = await gather_all(links, worker, settings.max_concurrency)
    sources = [s for s in outcomes if s is not None]

    log.info(
        "successfully analysed %d %ss you've marked", len(sources), settings.media_type
    )
    return sources
