# backend/app/services/report/fields.py
import logging

from app.schemas.mapping import MappingTable
from .excel import write_cell
from .outcomes import EmbedOutcome

logger = logging.getLogger(__name__)

# 写真シートの見出し（マッピングテーブルとは別の固定ルール）
PHOTO_SHEETS = ("光配線写真①", "光配線写真②", "光配線写真③", "専有部調査写真")
PHOTO_SHEET_TITLE_CELLS = ("B2", "G2")


def photo_sheet_title(corporation: str) -> str:
    # 全角スペース区切り
    return f"{corporation}　光配線写真"


def write_field(workbook, table: MappingTable, field_name: str, value) -> list[EmbedOutcome]:
    """report_data_cells[field_name] の各セルに value を書く。"""
    cells = table.report_data_cells.get(field_name)
    if not cells:
        logger.debug("No cell mapping found for type '%s'", field_name)
        return []

    outcomes = []
    for mapping in cells:
        if mapping.sheet not in workbook.sheetnames:
            logger.warning("Worksheet '%s' not found for cell type '%s'", mapping.sheet, field_name)
            outcomes.append(EmbedOutcome.skipped(
                "field", field_name, "worksheet not found", mapping.sheet, mapping.cell,
            ))
            continue
        if value is None or value == "":
            outcomes.append(EmbedOutcome.skipped(
                "field", field_name, "empty value", mapping.sheet, mapping.cell,
            ))
            continue
        write_cell(workbook[mapping.sheet], mapping.cell, value)
        outcomes.append(EmbedOutcome.embedded("field", field_name, mapping.sheet, mapping.cell))
    return outcomes


def write_photo_sheet_titles(workbook, corporation: str) -> list[EmbedOutcome]:
    title = photo_sheet_title(corporation)
    outcomes = []
    for sheet_name in PHOTO_SHEETS:
        if sheet_name not in workbook.sheetnames:
            logger.debug("Worksheet '%s' not found for title writing", sheet_name)
            outcomes.append(EmbedOutcome.skipped("title", sheet_name, "worksheet not found", sheet_name))
            continue
        ws = workbook[sheet_name]
        for cell in PHOTO_SHEET_TITLE_CELLS:
            write_cell(ws, cell, title)
            outcomes.append(EmbedOutcome.embedded("title", sheet_name, sheet_name, cell))
    return outcomes
