# backend/app/schemas/commons.py
from pydantic import BaseModel
from typing import Optional, Literal

DocumentType = Literal["completion_drawings", "survey_report"]
SurveySubType = Literal["FTTH", "introduction", "migration"]


class ErrorOut(BaseModel):
    message: str
    error: str
    details: Optional[str] = None
