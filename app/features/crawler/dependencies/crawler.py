from typing import Optional

from app.features.crawler.services.crawler_service import AccessibilityCrawler

_crawler: Optional[AccessibilityCrawler] = None


async def get_crawler() -> AccessibilityCrawler:
    """
    Dependency returning the process-wide crawler.

    The browser behind it is launched on the first request and reused;
    requests queue on the crawler's lock so only one tab is driven at a time.
    """
    global _crawler
    if _crawler is None:
        _crawler = AccessibilityCrawler()
    return _crawler


async def shutdown_crawler() -> None:
    global _crawler
    crawler, _crawler = _crawler, None
    if crawler is not None:
        await crawler.close()
