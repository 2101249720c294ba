# backend/app/services/report/templates.py
from pathlib import Path
import logging

from openpyxl import load_workbook
from openpyxl.workbook.workbook import Workbook

from .errors import TemplateNotFoundError, ReportGenerationError

logger = logging.getLogger(__name__)


class TemplateStore:
    """テンプレート Excel の置き場所。ファイルは読み取り専用として扱う。"""

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, template_file: str) -> Path:
        return self.root / template_file

    def open(self, template_file: str) -> Workbook:
        path = self.path_for(template_file)
        if not path.is_file():
            logger.error("Template file not found at path: %s", path)
            raise TemplateNotFoundError(f"Template file not found: {template_file}")
        try:
            # .xlsm もマクロは読み込まない（出力は .xlsx）
            workbook = load_workbook(path, keep_vba=False)
        except Exception as e:
            logger.exception("Failed to load template %s", path)
            raise ReportGenerationError(f"Failed to load template: {template_file}", details=str(e)) from e
        logger.debug("Loaded template %s (sheets: %s)", path, workbook.sheetnames)
        return workbook

    def list_corporations(self) -> list[str]:
        """法人別テンプレートのサブディレクトリ名一覧。"""
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_dir() and not p.name.startswith("."))
