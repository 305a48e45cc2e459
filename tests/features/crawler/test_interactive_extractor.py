import pytest

from app.features.crawler.services.interactive_extractor import InteractiveExtractor
from app.features.crawler.services.page_scripts import INTERACTIVE_SCRIPT
from tests.factories import raw_element


class TestTouchTargets:
    @pytest.mark.parametrize(
        "width, height, expected",
        [
            (44, 44, True),
            (43, 44, False),
            (44, 43, False),
            (120, 48, True),
            (0, 0, False),
        ],
    )
    def test_minimum_size(self, width, height, expected):
        record = InteractiveExtractor.build_record(raw_element("button", width=width, height=height))
        assert record.meets_touch_target_size is expected
        assert record.touch_target_size.width == width
        assert record.touch_target_size.height == height

    def test_missing_box_fails_size_check(self):
        raw = raw_element("button")
        raw["box"] = None
        record = InteractiveExtractor.build_record(raw)
        assert record.bounding_box is None
        assert record.meets_touch_target_size is False


class TestFocusability:
    @pytest.mark.parametrize(
        "attributes, focusable, tab_index",
        [
            ({}, True, None),
            ({"tabindex": "0"}, True, 0),
            ({"tabindex": "3"}, True, 3),
            ({"tabindex": "-1"}, False, -1),
            ({"tabindex": "abc"}, True, None),
        ],
    )
    def test_tabindex(self, attributes, focusable, tab_index):
        record = InteractiveExtractor.build_record(raw_element("div", attributes=attributes))
        assert record.is_focusable is focusable
        assert record.tab_index == tab_index

    def test_visible_focus_is_not_inspected(self):
        record = InteractiveExtractor.build_record(raw_element("a"))
        assert record.has_visible_focus is True


class TestAriaAttributes:
    def test_extract_interactive_elements(self, session_factory):
        session = session_factory({INTERACTIVE_SCRIPT: [
            raw_element(
                "div",
                text="Menu",
                attributes={
                    "role": "button",
                    "aria-label": "Open menu",
                    "aria-describedby": "menu-help",
                    "tabindex": "0",
                },
                width=48,
                height=48,
            ),
            raw_element("a", text="Home", attributes={"href": "/"}),
        ]})

        records = InteractiveExtractor.extract_interactive_elements(session)

        assert len(records) == 2
        assert records[0].role == "button"
        assert records[0].aria_label == "Open menu"
        assert records[0].aria_described_by == "menu-help"
        assert records[0].meets_touch_target_size is True
        assert records[1].role is None
        assert records[1].aria_label is None
