# backend/app/schemas/photo.py
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from .commons import DocumentType, SurveySubType


class PhotoIn(BaseModel):
    """アップロード済み写真のレコード（画像本体は外部ストレージにある）。"""
    model_config = ConfigDict(populate_by_name=True)

    corporation: str = Field(min_length=1)
    document_type: DocumentType = Field(alias="documentType")
    survey_sub_type: Optional[SurveySubType] = Field(default=None, alias="surveySubType")
    survey_date: str = Field(alias="surveyDate", min_length=1)
    surveyor: str = Field(min_length=1)
    tag: str = Field(min_length=1)
    image_url: str = Field(alias="imageUrl", min_length=1)
    transcription: Optional[str] = None
    diagram_symbols: list[str] = Field(default_factory=list, alias="diagramSymbols")


class PhotoOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    corporation: str
    document_type: str = Field(alias="documentType")
    survey_sub_type: Optional[str] = Field(default=None, alias="surveySubType")
    survey_date: str = Field(alias="surveyDate")
    surveyor: str
    tag: str
    image_url: str = Field(alias="imageUrl")
    transcription: Optional[str] = None
    diagram_symbols: list[str] = Field(default_factory=list, alias="diagramSymbols")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
