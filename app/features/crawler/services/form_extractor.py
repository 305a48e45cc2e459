from collections import OrderedDict
from typing import Any, Dict, List

from app.features.crawler.schemas.evidence import ElementRecord, FormAnalysis, FormSummary
from app.features.crawler.services.page_scripts import FORMS_SCRIPT
from app.features.crawler.services.session_manager import PageSession
from app.features.crawler.services.structure_extractor import element_record


class FormExtractor:
    """
    Label association, radio grouping and required-field checks.

    Error-message association, instruction quality and validation
    accessibility are not analysed; those lists stay empty.
    """

    @staticmethod
    def extract_forms(session: PageSession) -> FormAnalysis:
        raw = session.evaluate(FORMS_SCRIPT) or {}
        return FormExtractor.analyse(raw.get("controls") or [], raw.get("forms") or [])

    @staticmethod
    def analyse(controls: List[Dict[str, Any]], forms: List[Dict[str, Any]]) -> FormAnalysis:
        unlabeled: List[ElementRecord] = []
        missing_required: List[ElementRecord] = []

        for raw in controls:
            record = element_record(raw)
            if not FormExtractor.is_labeled(raw, record.attributes):
                unlabeled.append(record)
            if "required" in record.attributes and not record.attributes.get("aria-required"):
                missing_required.append(record)

        return FormAnalysis(
            unlabeled_inputs=unlabeled,
            missing_fieldsets=FormExtractor.ungrouped_radios(controls),
            missing_required=missing_required,
            forms=[
                FormSummary(
                    selector=form.get("selector", ""),
                    inputs=[element_record(raw) for raw in form.get("inputs") or []],
                    has_submit=bool(form.get("hasSubmit")),
                    has_validation=bool(form.get("hasValidation")),
                )
                for form in forms
            ],
        )

    @staticmethod
    def is_labeled(raw: Dict[str, Any], attributes: Dict[str, str]) -> bool:
        if raw.get("hasLabelFor"):
            return True
        return bool(attributes.get("aria-label") or attributes.get("aria-labelledby"))

    @staticmethod
    def ungrouped_radios(controls: List[Dict[str, Any]]) -> List[ElementRecord]:
        """Every member of a multi-radio group where no member sits inside a fieldset."""
        groups: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()
        for raw in controls:
            attributes = raw.get("attributes") or {}
            if (attributes.get("type") or "").lower() != "radio":
                continue
            name = attributes.get("name")
            if name:
                groups.setdefault(name, []).append(raw)

        missing: List[ElementRecord] = []
        for radios in groups.values():
            if len(radios) > 1 and not any(radio.get("inFieldset") for radio in radios):
                missing.extend(element_record(radio) for radio in radios)
        return missing
