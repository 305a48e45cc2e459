from typing import Any, Dict, List

from app.features.crawler.schemas.evidence import Dimensions, InteractiveElementRecord
from app.features.crawler.services.page_scripts import INTERACTIVE_SCRIPT
from app.features.crawler.services.session_manager import PageSession
from app.features.crawler.services.structure_extractor import element_fields
from app.features.crawler.utils.heuristics import parse_tab_index

MIN_TOUCH_TARGET_PX = 44


class InteractiveExtractor:

    @staticmethod
    def extract_interactive_elements(session: PageSession) -> List[InteractiveElementRecord]:
        return [
            InteractiveExtractor.build_record(raw)
            for raw in session.evaluate(INTERACTIVE_SCRIPT) or []
        ]

    @staticmethod
    def build_record(raw: Dict[str, Any]) -> InteractiveElementRecord:
        fields = element_fields(raw)
        attributes = fields["attributes"]
        box = fields["bounding_box"]
        width = box.width if box else 0.0
        height = box.height if box else 0.0
        tab_index = parse_tab_index(attributes.get("tabindex"))

        return InteractiveElementRecord(
            **fields,
            # absent or unparsable tabindex counts as focusable
            is_focusable=tab_index != -1,
            # focus styles are not inspected; see DESIGN.md
            has_visible_focus=True,
            tab_index=tab_index,
            role=attributes.get("role") or None,
            aria_label=attributes.get("aria-label") or None,
            aria_described_by=attributes.get("aria-describedby") or None,
            touch_target_size=Dimensions(width=width, height=height),
            meets_touch_target_size=meets_touch_target(width, height),
        )


def meets_touch_target(width: float, height: float) -> bool:
    return width >= MIN_TOUCH_TARGET_PX and height >= MIN_TOUCH_TARGET_PX
