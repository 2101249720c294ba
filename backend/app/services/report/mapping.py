# backend/app/services/report/mapping.py
from pathlib import Path
import json
import logging

from pydantic import ValidationError

from app.schemas.mapping import MappingTable, normalize_name
from .errors import ReportGenerationError

logger = logging.getLogger(__name__)

# アップロード画面のタグ一覧で使うマッピングキー
DEFAULT_TAGS_KEY = "survey_report_FTTH"


def load_mapping_table(path: Path) -> MappingTable:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ReportGenerationError(f"Failed to read mapping table: {path}", details=str(e)) from e
    try:
        table = MappingTable.model_validate(data)
    except ValidationError as e:
        raise ReportGenerationError(f"Invalid mapping table: {path}", details=str(e)) from e
    logger.info(
        "Loaded mapping table %s (%d templates, %d symbols)",
        path, len(table.templates), len(table.system_diagram_symbols),
    )
    return table


class Catalog:
    """タグ・記号の一覧をマッピングテーブルから引く。"""

    def __init__(self, table: MappingTable):
        self.table = table

    def list_tags(self, mapping_key: str = DEFAULT_TAGS_KEY) -> list[str]:
        template = self.table.template(mapping_key)
        return list(template.tags) if template else []

    def list_symbol_names(self) -> list[str]:
        return [normalize_name(name) for name in self.table.system_diagram_symbols]

    def list_symbol_details(self) -> dict:
        return {
            name: [m.model_dump() for m in mappings]
            for name, mappings in self.table.system_diagram_symbols.items()
        }
