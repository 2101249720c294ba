"""
test_resolver.py — template / mapping-key resolution.

Tests cover:
  - every valid (documentType, surveySubType) pair resolves deterministically
  - survey_report without a sub-type falls back to FTTH with a warning
  - unknown sub-types / document types fail as 400 before the template store is touched
"""

import asyncio
import dataclasses

import pytest

from app.schemas.report import ReportRequest
from app.services.report.errors import InvalidRequestError, TemplateNotFoundError
from app.services.report.generator import ReportGenerator
from app.services.report.resolver import resolve_template


@pytest.mark.parametrize(
    "document_type, sub_type, expected",
    [
        ("completion_drawings", None, ("竣工図書.xlsm", "completion_drawings", "竣工図書")),
        ("survey_report", "FTTH", ("template_sanitized.xlsx", "survey_report_FTTH", "調査報告資料")),
        ("survey_report", "introduction", ("導入調査報告資料.xlsx", "survey_report_introduction", "調査報告資料")),
        ("survey_report", "migration", ("マイグレーション調査報告資料.xlsx", "survey_report_migration", "調査報告資料")),
    ],
)
def test_valid_pairs_resolve_to_stable_triples(document_type, sub_type, expected):
    first = resolve_template(document_type, sub_type)
    second = resolve_template(document_type, sub_type)
    assert (first.template_file, first.mapping_key, first.display_document_type) == expected
    assert first == second
    assert first.warnings == ()


def test_completion_drawings_ignores_sub_type():
    resolved = resolve_template("completion_drawings", "migration")
    assert resolved.mapping_key == "completion_drawings"
    assert resolved.survey_sub_type is None


@pytest.mark.parametrize("missing", [None, ""])
def test_survey_report_without_sub_type_defaults_to_ftth(missing):
    resolved = resolve_template("survey_report", missing)
    assert resolved.template_file == "template_sanitized.xlsx"
    assert resolved.mapping_key == "survey_report_FTTH"
    assert resolved.survey_sub_type == "FTTH"
    assert len(resolved.warnings) == 1
    assert "FTTH" in resolved.warnings[0]


def test_unknown_sub_type_is_a_bad_request():
    with pytest.raises(InvalidRequestError) as exc:
        resolve_template("survey_report", "bogus")
    assert exc.value.status_code == 400
    assert "bogus" in exc.value.error


def test_unknown_document_type_is_a_bad_request():
    with pytest.raises(InvalidRequestError):
        resolve_template("floor_plan", None)


class _ExplodingTemplateStore:
    def __init__(self):
        self.calls = 0

    def open(self, template_file):
        self.calls += 1
        raise AssertionError("template store must not be touched")


def test_bad_sub_type_fails_before_template_store_io(resources, photo_source):
    store = _ExplodingTemplateStore()
    generator = ReportGenerator(dataclasses.replace(resources, templates=store))
    request = ReportRequest(
        corporation="Acme", documentType="survey_report", surveySubType="bogus",
        surveyDate="2024-05-01", surveyor="Yamada",
    )
    with pytest.raises(InvalidRequestError):
        asyncio.run(generator.generate(request, photo_source))
    assert store.calls == 0
    assert photo_source.queries == []


def test_missing_template_file_is_not_found(resources, templates_dir, photo_source):
    (templates_dir / "竣工図書.xlsm").unlink()
    request = ReportRequest(
        corporation="Acme", documentType="completion_drawings",
        surveyDate="2024-05-01", surveyor="Yamada",
    )
    with pytest.raises(TemplateNotFoundError) as exc:
        asyncio.run(ReportGenerator(resources).generate(request, photo_source))
    assert exc.value.status_code == 404
    assert "竣工図書.xlsm" in exc.value.error
