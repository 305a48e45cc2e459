from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer

from app.platform.utils.url_validator import validate_url


LandmarkKind = Literal[
    "banner",
    "navigation",
    "main",
    "complementary",
    "contentinfo",
    "search",
    "form",
    "region",
]


class Snapshot(BaseModel):
    """Base for every captured record; values never change after capture."""
    model_config = ConfigDict(frozen=True)


class BoundingBox(Snapshot):
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


class Dimensions(Snapshot):
    width: float = 0.0
    height: float = 0.0


class ElementRecord(Snapshot):
    """Shape shared by most extracted DOM elements"""
    selector: str
    tag_name: str
    text: Optional[str] = None
    attributes: Dict[str, str] = Field(default_factory=dict)
    bounding_box: Optional[BoundingBox] = None


class PageMetadata(Snapshot):
    """Document level metadata. Fields missing from the page are left out when serialised."""
    title: Optional[str] = None
    lang: Optional[str] = None
    viewport: Optional[str] = None
    description: Optional[str] = None
    charset: Optional[str] = None

    @model_serializer(mode="wrap")
    def _drop_absent(self, handler):
        return {key: value for key, value in handler(self).items() if value is not None}


class ImageRecord(Snapshot):
    src: str
    alt: Optional[str] = None
    selector: str
    dimensions: Dimensions = Field(default_factory=Dimensions)
    is_decorative: bool = False
    has_empty_alt: bool = False
    is_background_image: bool = False
    context: Optional[str] = None


class HeadingRecord(ElementRecord):
    level: int = Field(..., ge=1, le=6)
    text: str = ""
    is_empty: bool = False
    has_proper_nesting: bool = True


class LinkRecord(ElementRecord):
    href: str = ""
    text: str = ""
    has_generic_text: bool = False
    is_empty_link: bool = False
    has_title: bool = False
    opens_in_new_window: bool = False


class ColorSample(Snapshot):
    foreground: str
    background: str
    selector: str
    contrast: float = Field(..., ge=1.0)
    meets_aa: bool
    meets_aaa: bool
    font_size: float
    is_large_text: bool
    context: str = ""


class InteractiveElementRecord(ElementRecord):
    is_focusable: bool = True
    has_visible_focus: bool = True
    tab_index: Optional[int] = None
    role: Optional[str] = None
    aria_label: Optional[str] = None
    aria_described_by: Optional[str] = None
    touch_target_size: Dimensions = Field(default_factory=Dimensions)
    meets_touch_target_size: bool = False


class LandmarkRecord(ElementRecord):
    landmark_type: LandmarkKind = "region"
    has_label: bool = False
    is_unique: bool = True


class FormSummary(Snapshot):
    selector: str
    inputs: List[ElementRecord] = Field(default_factory=list)
    has_submit: bool = False
    has_validation: bool = False


class FormAnalysis(Snapshot):
    unlabeled_inputs: List[ElementRecord] = Field(default_factory=list)
    missing_fieldsets: List[ElementRecord] = Field(default_factory=list)
    missing_required: List[ElementRecord] = Field(default_factory=list)
    # Not analysed yet; always empty rather than guessed.
    no_error_association: List[ElementRecord] = Field(default_factory=list)
    poor_instructions: List[ElementRecord] = Field(default_factory=list)
    inaccessible_validation: List[ElementRecord] = Field(default_factory=list)
    forms: List[FormSummary] = Field(default_factory=list)


class AccessibilityNode(Snapshot):
    name: Optional[str] = None
    role: Optional[str] = None
    selector: str
    properties: Dict[str, Any] = Field(default_factory=dict)


class LanguageAttribute(Snapshot):
    selector: str
    lang: str = ""


class MediaElementRecord(Snapshot):
    selector: str
    media_type: Literal["video", "audio"]
    has_controls: bool = False
    has_captions: bool = False
    has_transcript: bool = False
    autoplays: bool = False


class DocumentStructureSummary(Snapshot):
    has_h1: bool = False
    h1_count: int = 0
    heading_hierarchy: List[int] = Field(default_factory=list)
    has_proper_heading_nesting: bool = True
    landmark_count: int = 0
    skip_link_count: int = 0


class ExtractionMetadata(Snapshot):
    timestamp: str
    extraction_time_ms: int
    page_load_time_ms: int
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class EvidenceDocument(Snapshot):
    """Everything captured from one page, handed to the scoring stage as-is."""
    url: str
    html_source: str = ""
    page_metadata: PageMetadata = Field(default_factory=PageMetadata)
    images: List[ImageRecord] = Field(default_factory=list)
    forms: FormAnalysis = Field(default_factory=FormAnalysis)
    headings: List[HeadingRecord] = Field(default_factory=list)
    links: List[LinkRecord] = Field(default_factory=list)
    colors: List[ColorSample] = Field(default_factory=list)
    interactive_elements: List[InteractiveElementRecord] = Field(default_factory=list)
    landmarks: List[LandmarkRecord] = Field(default_factory=list)
    accessibility_tree: List[AccessibilityNode] = Field(default_factory=list)
    has_skip_links: bool = False
    language_attributes: List[LanguageAttribute] = Field(default_factory=list)
    media_elements: List[MediaElementRecord] = Field(default_factory=list)
    document_structure: DocumentStructureSummary = Field(default_factory=DocumentStructureSummary)
    extraction_metadata: ExtractionMetadata

    @property
    def has_warnings(self) -> bool:
        return bool(self.extraction_metadata.warnings)


class EvidenceRequest(BaseModel):
    """Request schema for evidence extraction"""
    url: str = Field(..., description="Absolute http(s) URL of the page to inspect")

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        is_valid, error = validate_url(value)
        if not is_valid:
            raise ValueError(error)
        return value.strip()

    class Config:
        json_schema_extra = {
            "example": {
                "url": "https://example.com"
            }
        }
