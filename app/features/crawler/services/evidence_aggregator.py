import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Callable, List, NamedTuple, Optional, Tuple

from app.features.crawler.schemas.evidence import (
    DocumentStructureSummary,
    EvidenceDocument,
    ExtractionMetadata,
    FormAnalysis,
    PageMetadata,
)
from app.features.crawler.services.color_extractor import ColorExtractor
from app.features.crawler.services.form_extractor import FormExtractor
from app.features.crawler.services.interactive_extractor import InteractiveExtractor
from app.features.crawler.services.session_manager import PageSession
from app.features.crawler.services.structure_extractor import StructureExtractor
from app.platform.logger import get_logger

logger = get_logger(__name__)


class Category(NamedTuple):
    field: str
    label: str
    extract: Callable[[PageSession], Any]
    empty: Callable[[], Any]


CATEGORIES: Tuple[Category, ...] = (
    Category("html_source", "HTML snapshot", StructureExtractor.extract_html, str),
    Category("page_metadata", "page metadata", StructureExtractor.extract_metadata, PageMetadata),
    Category("images", "images", StructureExtractor.extract_images, list),
    Category("forms", "forms", FormExtractor.extract_forms, FormAnalysis),
    Category("headings", "headings", StructureExtractor.extract_headings, list),
    Category("links", "links", StructureExtractor.extract_links, list),
    Category("colors", "color contrast", ColorExtractor.extract_colors, list),
    Category("interactive_elements", "interactive elements", InteractiveExtractor.extract_interactive_elements, list),
    Category("landmarks", "landmarks", StructureExtractor.extract_landmarks, list),
    Category("accessibility_tree", "accessibility tree", StructureExtractor.extract_accessibility_tree, list),
    Category("language_attributes", "language attributes", StructureExtractor.extract_language_attributes, list),
    Category("media_elements", "media elements", StructureExtractor.extract_media, list),
    Category("document_structure", "document structure", StructureExtractor.extract_structure, DocumentStructureSummary),
)


class CategoryOutcome(NamedTuple):
    category: Category
    value: Any
    error: Optional[BaseException]


async def _run_isolated(category: Category, session: PageSession) -> CategoryOutcome:
    """Run one extractor off the event loop; its failure never reaches its siblings."""
    try:
        value = await asyncio.to_thread(category.extract, session)
        return CategoryOutcome(category, value, None)
    except Exception as e:
        logger.warning(f"{category.label} extraction failed for {session.url}: {e}")
        return CategoryOutcome(category, category.empty(), e)


class EvidenceAggregator:
    """Fans every extractor out against one loaded page and assembles the evidence document."""

    @staticmethod
    async def collect(
        session: PageSession,
        categories: Tuple[Category, ...] = CATEGORIES,
    ) -> EvidenceDocument:
        started = time.monotonic()

        outcomes = await asyncio.gather(
            *(_run_isolated(category, session) for category in categories)
        )

        fields = {}
        errors: List[str] = []
        warnings: List[str] = []
        for outcome in outcomes:
            fields[outcome.category.field] = outcome.value
            if outcome.error is not None:
                warnings.append(
                    f"Could not extract {outcome.category.label}; this category is reported empty"
                )
                errors.append(
                    f"{outcome.category.field}: {type(outcome.error).__name__}: {outcome.error}"
                )

        structure = fields.get("document_structure") or DocumentStructureSummary()
        extraction_time_ms = session.page_load_time_ms + int((time.monotonic() - started) * 1000)

        document = EvidenceDocument(
            url=session.url,
            **fields,
            has_skip_links=structure.skip_link_count > 0,
            extraction_metadata=ExtractionMetadata(
                timestamp=datetime.now(timezone.utc).isoformat(),
                extraction_time_ms=extraction_time_ms,
                page_load_time_ms=session.page_load_time_ms,
                errors=errors,
                warnings=warnings,
            ),
        )

        logger.info(
            f"Extracted evidence for {session.url} in {extraction_time_ms}ms "
            f"({len(warnings)} categories failed)"
        )
        return document
