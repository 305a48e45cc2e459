import asyncio
import contextlib
from typing import Optional

from app.features.crawler.schemas.evidence import EvidenceDocument
from app.features.crawler.services.evidence_aggregator import EvidenceAggregator
from app.features.crawler.services.session_manager import BrowserSessionManager
from app.platform.logger import get_logger

logger = get_logger(__name__)


class AccessibilityCrawler:
    """
    Turns a URL into an EvidenceDocument.

    Holds one browser for its lifetime and reuses it across sequential
    calls. Calls on the same crawler are queued, one page at a time;
    create one crawler per worker for parallel crawling.

    Example:
        async with AccessibilityCrawler() as crawler:
            document = await crawler.extract_page_data("https://example.com")
    """

    def __init__(self, session_manager: Optional[BrowserSessionManager] = None):
        self.session_manager = session_manager or BrowserSessionManager()
        self._lock = asyncio.Lock()

    async def extract_page_data(self, url: str) -> EvidenceDocument:
        """
        Raises:
            NavigationError: the page could not be loaded; nothing was extracted.
        """
        async with self._lock:
            logger.info(f"Extracting accessibility evidence from {url}")
            opening = asyncio.ensure_future(
                asyncio.to_thread(self.session_manager.open_session, url)
            )
            try:
                session = await asyncio.shield(opening)
            except asyncio.CancelledError:
                # the navigation thread still owns the browser; keep the lock until its tab is gone
                release = asyncio.ensure_future(self._release_abandoned(opening))
                while not release.done():
                    with contextlib.suppress(asyncio.CancelledError):
                        await asyncio.shield(release)
                raise
            try:
                return await EvidenceAggregator.collect(session)
            finally:
                await asyncio.to_thread(self.session_manager.close_session, session)

    async def _release_abandoned(self, opening: "asyncio.Future") -> None:
        try:
            session = await opening
        except Exception as e:
            # failed opens close their own tab
            logger.info(f"Abandoned navigation ended without a page: {e}")
            return
        await asyncio.to_thread(self.session_manager.close_session, session)
        logger.info(f"Released tab for abandoned request {session.url}")

    async def close(self) -> None:
        await asyncio.to_thread(self.session_manager.close)

    async def __aenter__(self) -> "AccessibilityCrawler":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


async def crawl_page(url: str, session_manager: Optional[BrowserSessionManager] = None) -> EvidenceDocument:
    """One-shot crawl: the browser is launched for this URL and always shut down afterwards."""
    crawler = AccessibilityCrawler(session_manager)
    try:
        return await crawler.extract_page_data(url)
    finally:
        await crawler.close()
