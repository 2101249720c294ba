# backend/app/services/report/errors.py
from typing import Optional


class ReportError(Exception):
    """帳票生成の失敗。API 層で {message, error, details} に変換される。"""

    status_code = 500
    message = "Internal Server Error"

    def __init__(self, error: str, details: Optional[str] = None):
        super().__init__(error)
        self.error = error
        self.details = details

    def to_dict(self) -> dict:
        body = {"message": self.message, "error": self.error}
        if self.details:
            body["details"] = self.details
        return body


class InvalidRequestError(ReportError):
    """必須項目の欠落、未知の documentType / surveySubType。"""
    status_code = 400
    message = "Bad Request"


class TemplateNotFoundError(ReportError):
    status_code = 404
    message = "Template file not found"


class ReportGenerationError(ReportError):
    """テンプレートの読込・保存・出力先への書込みの失敗。"""
    status_code = 500
    message = "Internal Server Error"
