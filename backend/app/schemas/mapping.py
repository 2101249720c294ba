# backend/app/schemas/mapping.py
"""Mapping Table models.

``mapping.json`` lets a tag or symbol point at a single target object or at a
list of them. Everything is normalised to lists while loading so the report
generator never has to check which shape it got.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Any, Optional
import unicodedata


def _as_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    return value


def normalize_name(name: str) -> str:
    """Canonical form used for symbol-name lookups (NFC, surrounding whitespace stripped)."""
    return unicodedata.normalize("NFC", name).strip()


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class CellMapping(_Frozen):
    sheet: str
    cell: str


class ImageMapping(_Frozen):
    cell: str
    width: float
    height: float


class MemoMapping(_Frozen):
    cell: str


class TagMapping(_Frozen):
    sheet: str
    image: Optional[ImageMapping] = None
    memo: Optional[MemoMapping] = None


class SymbolMapping(_Frozen):
    sheet: str
    image_path: str
    cell: str
    width: float
    height: float


class TemplateMapping(_Frozen):
    tags: list[str] = Field(default_factory=list)
    mappings: dict[str, list[TagMapping]] = Field(default_factory=dict)

    @field_validator("mappings", mode="before")
    @classmethod
    def _fan_out(cls, value):
        if not isinstance(value, dict):
            return value
        return {tag: _as_list(entry) for tag, entry in value.items()}


class MappingTable(_Frozen):
    report_data_cells: dict[str, list[CellMapping]] = Field(default_factory=dict)
    system_diagram_symbols: dict[str, list[SymbolMapping]] = Field(default_factory=dict)
    # completion_drawings / survey_report_<subType> をキーにしたテンプレート別マッピング
    templates: dict[str, TemplateMapping] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_templates(cls, data):
        if not isinstance(data, dict) or "templates" in data:
            return data
        fixed = {"report_data_cells", "system_diagram_symbols"}
        templates = {
            key: value
            for key, value in data.items()
            if key not in fixed and isinstance(value, dict) and ("mappings" in value or "tags" in value)
        }
        return {
            "report_data_cells": data.get("report_data_cells") or {},
            "system_diagram_symbols": data.get("system_diagram_symbols") or {},
            "templates": templates,
        }

    @field_validator("report_data_cells", mode="before")
    @classmethod
    def _cells_as_list(cls, value):
        if not isinstance(value, dict):
            return value
        return {field: _as_list(entry) for field, entry in value.items()}

    @field_validator("system_diagram_symbols", mode="before")
    @classmethod
    def _symbols_as_list(cls, value):
        if not isinstance(value, dict):
            return value
        return {normalize_name(name): _as_list(entry) for name, entry in value.items()}

    def template(self, mapping_key: str) -> Optional[TemplateMapping]:
        return self.templates.get(mapping_key)
