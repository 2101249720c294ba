# backend/app/schemas/report.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from .commons import DocumentType


class ReportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    corporation: str = Field(min_length=1)
    address: Optional[str] = None
    document_type: DocumentType = Field(alias="documentType")
    # 不正なサブタイプは解決時に 400 として扱うため、ここでは文字列で受ける
    survey_sub_type: Optional[str] = Field(default=None, alias="surveySubType")
    survey_date: str = Field(alias="surveyDate", min_length=1)
    surveyor: str = Field(min_length=1)
    diagram_symbols: list[str] = Field(default_factory=list, alias="diagramSymbols")


class EmbedOutcomeOut(BaseModel):
    kind: str
    key: str
    sheet: Optional[str] = None
    cell: Optional[str] = None
    status: str
    reason: Optional[str] = None


class GenerationReportOut(BaseModel):
    embedded: int
    skipped: int
    failed: int
    warnings: list[str]
    outcomes: list[EmbedOutcomeOut]


class ReportOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    download_url: str = Field(alias="downloadUrl")
    file_name: str = Field(alias="fileName")
    report: GenerationReportOut
