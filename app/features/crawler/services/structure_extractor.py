from typing import Any, Dict, List, Optional

from app.features.crawler.schemas.evidence import (
    AccessibilityNode,
    BoundingBox,
    Dimensions,
    DocumentStructureSummary,
    ElementRecord,
    HeadingRecord,
    ImageRecord,
    LandmarkRecord,
    LanguageAttribute,
    LinkRecord,
    MediaElementRecord,
    PageMetadata,
)
from app.features.crawler.services.page_scripts import (
    ACCESSIBILITY_TREE_SCRIPT,
    HEADINGS_SCRIPT,
    IMAGES_SCRIPT,
    LANDMARKS_SCRIPT,
    LANGUAGE_SCRIPT,
    LINKS_SCRIPT,
    MEDIA_SCRIPT,
    METADATA_SCRIPT,
    STRUCTURE_SCRIPT,
)
from app.features.crawler.services.session_manager import PageSession
from app.features.crawler.utils.heuristics import (
    classify_landmark,
    has_generic_text,
    heading_nesting_flags,
    landmark_label,
    landmark_uniqueness,
)

IMAGE_CONTEXT_MAX_CHARS = 100
CAPTION_TRACK_KINDS = {"captions", "subtitles"}


def element_fields(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Common ElementRecord fields from a probe's raw element dict."""
    box = raw.get("box")
    return {
        "selector": raw.get("selector", ""),
        "tag_name": raw.get("tagName", ""),
        "text": raw.get("text"),
        "attributes": {str(k): str(v) for k, v in (raw.get("attributes") or {}).items()},
        "bounding_box": BoundingBox(**box) if box else None,
    }


def element_record(raw: Dict[str, Any]) -> ElementRecord:
    return ElementRecord(**element_fields(raw))


class StructureExtractor:
    """Read-only structural queries: metadata, images, headings, links, landmarks."""

    @staticmethod
    def extract_metadata(session: PageSession) -> PageMetadata:
        raw = session.evaluate(METADATA_SCRIPT) or {}
        # empty strings count as absent
        return PageMetadata(**{key: value for key, value in raw.items() if value})

    @staticmethod
    def extract_html(session: PageSession) -> str:
        return session.page_source()

    @staticmethod
    def extract_images(session: PageSession) -> List[ImageRecord]:
        return [StructureExtractor.build_image(raw) for raw in session.evaluate(IMAGES_SCRIPT) or []]

    @staticmethod
    def build_image(raw: Dict[str, Any]) -> ImageRecord:
        alt: Optional[str] = raw.get("alt")
        # exact comparison: alt=" " is not decorative, a missing alt is not decorative
        is_decorative = alt is not None and alt == ""
        context = (raw.get("context") or "").strip()[:IMAGE_CONTEXT_MAX_CHARS] or None
        return ImageRecord(
            src=raw.get("src") or "",
            alt=alt,
            selector=raw.get("selector", ""),
            dimensions=Dimensions(width=raw.get("width") or 0, height=raw.get("height") or 0),
            is_decorative=is_decorative,
            has_empty_alt=is_decorative,
            is_background_image=bool(raw.get("background")),
            context=context,
        )

    @staticmethod
    def extract_headings(session: PageSession) -> List[HeadingRecord]:
        return StructureExtractor.build_headings(session.evaluate(HEADINGS_SCRIPT) or [])

    @staticmethod
    def build_headings(raw_headings: List[Dict[str, Any]]) -> List[HeadingRecord]:
        levels = [int(raw["level"]) for raw in raw_headings]
        nesting = heading_nesting_flags(levels)
        headings = []
        for raw, level, properly_nested in zip(raw_headings, levels, nesting):
            fields = element_fields(raw)
            text = (fields.pop("text") or "").strip()
            headings.append(
                HeadingRecord(
                    **fields,
                    text=text,
                    level=level,
                    is_empty=len(text) == 0,
                    has_proper_nesting=properly_nested,
                )
            )
        return headings

    @staticmethod
    def extract_links(session: PageSession) -> List[LinkRecord]:
        return [StructureExtractor.build_link(raw) for raw in session.evaluate(LINKS_SCRIPT) or []]

    @staticmethod
    def build_link(raw: Dict[str, Any]) -> LinkRecord:
        fields = element_fields(raw)
        text = (fields.pop("text") or "").strip()
        attributes = fields["attributes"]
        return LinkRecord(
            **fields,
            text=text,
            href=raw.get("href") or "",
            has_generic_text=has_generic_text(text),
            is_empty_link=len(text) == 0,
            has_title=bool(attributes.get("title")),
            opens_in_new_window=attributes.get("target") == "_blank",
        )

    @staticmethod
    def extract_landmarks(session: PageSession) -> List[LandmarkRecord]:
        return StructureExtractor.build_landmarks(session.evaluate(LANDMARKS_SCRIPT) or [])

    @staticmethod
    def build_landmarks(raw_landmarks: List[Dict[str, Any]]) -> List[LandmarkRecord]:
        prepared = []
        for raw in raw_landmarks:
            fields = element_fields(raw)
            attributes = fields["attributes"]
            kind = classify_landmark(fields["tag_name"], attributes.get("role"))
            prepared.append((fields, kind, landmark_label(attributes)))

        uniqueness = landmark_uniqueness([(kind, label) for _, kind, label in prepared])
        return [
            LandmarkRecord(
                **fields,
                landmark_type=kind,
                has_label=label is not None,
                is_unique=unique,
            )
            for (fields, kind, label), unique in zip(prepared, uniqueness)
        ]

    @staticmethod
    def extract_structure(session: PageSession) -> DocumentStructureSummary:
        raw = session.evaluate(STRUCTURE_SCRIPT) or {}
        levels = [int(level) for level in raw.get("headingLevels") or []]
        h1_count = levels.count(1)
        return DocumentStructureSummary(
            has_h1=h1_count > 0,
            h1_count=h1_count,
            heading_hierarchy=levels,
            has_proper_heading_nesting=all(heading_nesting_flags(levels)),
            landmark_count=int(raw.get("landmarkCount") or 0),
            skip_link_count=int(raw.get("skipLinkCount") or 0),
        )

    @staticmethod
    def extract_accessibility_tree(session: PageSession) -> List[AccessibilityNode]:
        """Flat, simplified listing; not the browser's real accessibility tree."""
        nodes = []
        for raw in session.evaluate(ACCESSIBILITY_TREE_SCRIPT) or []:
            properties = {
                "tag_name": raw.get("tagName"),
                "id": raw.get("id"),
                "class_name": raw.get("className"),
            }
            nodes.append(
                AccessibilityNode(
                    name=raw.get("name"),
                    role=raw.get("role"),
                    selector=raw.get("selector", ""),
                    properties={k: v for k, v in properties.items() if v is not None},
                )
            )
        return nodes

    @staticmethod
    def extract_language_attributes(session: PageSession) -> List[LanguageAttribute]:
        return [
            LanguageAttribute(selector=raw.get("selector", ""), lang=raw.get("lang") or "")
            for raw in session.evaluate(LANGUAGE_SCRIPT) or []
        ]

    @staticmethod
    def extract_media(session: PageSession) -> List[MediaElementRecord]:
        media = []
        for raw in session.evaluate(MEDIA_SCRIPT) or []:
            track_kinds = set(raw.get("trackKinds") or [])
            media.append(
                MediaElementRecord(
                    selector=raw.get("selector", ""),
                    media_type=raw.get("type"),
                    has_controls=bool(raw.get("controls")),
                    has_captions=bool(track_kinds & CAPTION_TRACK_KINDS),
                    has_transcript=False,  # not detectable from markup alone
                    autoplays=bool(raw.get("autoplay")),
                )
            )
        return media
