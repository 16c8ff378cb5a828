# markrec/api.py
# The primary, programmer-facing API for the library.

from __future__ import annotations

import logging

import httpx

from markrec.config import Settings
from markrec.extract import get_num
from markrec.fetcher import PageFetcher
from markrec.models import Result
from markrec.pipeline import fetch_sources, prepare_links
from markrec.ranking import build_result

log = logging.getLogger(__name__)


async def recommend(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Result:
    """
    The main API function. Orchestrates discovery, detail fetching and ranking.

    Args:
        settings: A validated Settings value (see config.load_settings).
        transport: Optional httpx transport, mainly for tests.

    Returns:
        A Result holding the ranked recommendations and run counters.

    Raises:
        FetchError: the marked-item total or a listing page could not be fetched.
        PageFormatError: the listing page carried no item total.
    """
    log.debug(
        "Starting recommendation run for user %s (%s)",
        settings.user_id,
        settings.media_type,
    )

    async with PageFetcher(settings, transport=transport) as fetcher:
        log.debug("Step 1: Discovering marked %ss.", settings.media_type)
        links = await prepare_links(fetcher, settings)

        log.debug("Step 2: Fetching %d detail pages.", len(links))
        sources = await fetch_sources(fetcher, settings, links)

    log.debug("Step 3: Ranking recommendations.")
    marked_ids = {get_num(link) for link in links}
    marked_ids.discard("")
    items = build_result(sources, settings, marked_ids=marked_ids)
    log.info("found %d %ss", len(items), settings.media_type)

    return Result(
        media_type=settings.media_type,
        marked_links=len(links),
        analysed=len(sources),
        items=items,
    )
