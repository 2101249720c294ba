# backend/app/services/report/resolver.py
"""documentType / surveySubType からテンプレートとマッピングキーを決める。"""
from dataclasses import dataclass
from typing import Optional
import logging

from .errors import InvalidRequestError

logger = logging.getLogger(__name__)

COMPLETION_DRAWINGS = "completion_drawings"
SURVEY_REPORT = "survey_report"
DEFAULT_SURVEY_SUB_TYPE = "FTTH"

COMPLETION_DRAWINGS_TEMPLATE = "竣工図書.xlsm"
SURVEY_REPORT_TEMPLATES = {
    "FTTH": "template_sanitized.xlsx",
    "introduction": "導入調査報告資料.xlsx",
    "migration": "マイグレーション調査報告資料.xlsx",
}

DISPLAY_DOCUMENT_TYPES = {
    COMPLETION_DRAWINGS: "竣工図書",
    SURVEY_REPORT: "調査報告資料",
}


@dataclass(frozen=True)
class ResolvedTemplate:
    template_file: str
    mapping_key: str
    display_document_type: str
    # completion_drawings では常に None
    survey_sub_type: Optional[str] = None
    warnings: tuple[str, ...] = ()


def resolve_template(document_type: str, survey_sub_type: Optional[str] = None) -> ResolvedTemplate:
    if document_type == COMPLETION_DRAWINGS:
        return ResolvedTemplate(
            template_file=COMPLETION_DRAWINGS_TEMPLATE,
            mapping_key=COMPLETION_DRAWINGS,
            display_document_type=DISPLAY_DOCUMENT_TYPES[COMPLETION_DRAWINGS],
        )

    if document_type == SURVEY_REPORT:
        warnings: tuple[str, ...] = ()
        if not survey_sub_type:
            logger.warning("surveySubType is missing for survey_report, defaulting to %s", DEFAULT_SURVEY_SUB_TYPE)
            survey_sub_type = DEFAULT_SURVEY_SUB_TYPE
            warnings = (f"surveySubType was not given; defaulted to '{DEFAULT_SURVEY_SUB_TYPE}'",)
        template_file = SURVEY_REPORT_TEMPLATES.get(survey_sub_type)
        if template_file is None:
            logger.warning("Invalid surveySubType %r for documentType 'survey_report'", survey_sub_type)
            raise InvalidRequestError(
                f"Invalid surveySubType '{survey_sub_type}'",
                details=f"expected one of: {', '.join(SURVEY_REPORT_TEMPLATES)}",
            )
        return ResolvedTemplate(
            template_file=template_file,
            mapping_key=f"{SURVEY_REPORT}_{survey_sub_type}",
            display_document_type=DISPLAY_DOCUMENT_TYPES[SURVEY_REPORT],
            survey_sub_type=survey_sub_type,
            warnings=warnings,
        )

    logger.warning("Could not determine template for documentType %r", document_type)
    raise InvalidRequestError(f"Invalid documentType '{document_type}'")
