# scripts/make_templates.py
# mapping.json が参照するシートだけを持つ空のテンプレートを templates/ に作る（ローカル開発用）
import json
import sys
from pathlib import Path

from openpyxl import Workbook

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "backend"))

from app.services.report.fields import PHOTO_SHEETS  # noqa: E402
from app.services.report.resolver import (  # noqa: E402
    COMPLETION_DRAWINGS, COMPLETION_DRAWINGS_TEMPLATE, SURVEY_REPORT, SURVEY_REPORT_TEMPLATES,
)


def sheets_for(mapping: dict, key: str) -> list[str]:
    names: list[str] = []

    def add(name):
        if name and name not in names:
            names.append(name)

    for cells in mapping.get("report_data_cells", {}).values():
        for c in cells if isinstance(cells, list) else [cells]:
            add(c.get("sheet"))
    for entry in mapping.get(key, {}).get("mappings", {}).values():
        for m in entry if isinstance(entry, list) else [entry]:
            add(m.get("sheet"))
    for entry in mapping.get("system_diagram_symbols", {}).values():
        for m in entry if isinstance(entry, list) else [entry]:
            add(m.get("sheet"))
    for name in PHOTO_SHEETS:
        add(name)
    return names


def main():
    mapping = json.loads((REPO_ROOT / "mapping.json").read_text(encoding="utf-8"))
    out_dir = REPO_ROOT / "templates"
    out_dir.mkdir(exist_ok=True)

    targets = {COMPLETION_DRAWINGS: COMPLETION_DRAWINGS_TEMPLATE}
    for sub_type, file_name in SURVEY_REPORT_TEMPLATES.items():
        targets[f"{SURVEY_REPORT}_{sub_type}"] = file_name

    for key, file_name in targets.items():
        path = out_dir / file_name
        if path.exists():
            print("skip", path)
            continue
        wb = Workbook()
        wb.remove(wb.active)
        for name in sheets_for(mapping, key):
            wb.create_sheet(name)
        wb.save(path)
        print("wrote", path)


if __name__ == "__main__":
    main()
