"""
conftest.py — Shared pytest fixtures for the survey report backend test suite.

No network access and no real database: image URLs are answered by an
``httpx.MockTransport`` and API tests run against in-memory SQLite.  Template
workbooks and PNG images are built on the fly with openpyxl and Pillow.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``app.*`` imports resolve correctly regardless of where pytest is invoked.
"""

import io
import os
import sys
import tempfile

import httpx
import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any app imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

# app.main builds a module-level app on import; keep its data dir out of the repo.
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="survey-report-test-"))
os.environ.setdefault("LOG_JSON", "false")


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

def _png(color=(200, 30, 30), size=(12, 8)) -> bytes:
    from PIL import Image
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture(scope="session")
def png_bytes() -> bytes:
    return _png()


@pytest.fixture(scope="session")
def jpeg_bytes() -> bytes:
    from PIL import Image
    buf = io.BytesIO()
    Image.new("RGB", (16, 16), (10, 120, 200)).save(buf, format="JPEG")
    return buf.getvalue()


class ImageServer:
    """Routes for the mock transport: url -> (status, body, content-type)."""

    def __init__(self):
        self.routes = {}
        self.requested = []

    def add(self, url, body, content_type="image/png", status=200):
        self.routes[url] = (status, body, content_type)

    def fail(self, url, status=404):
        self.routes[url] = (status, b"not found", "text/plain")

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        if url not in self.routes:
            raise httpx.ConnectError("connection refused", request=request)
        status, body, content_type = self.routes[url]
        headers = {"content-type": content_type} if content_type else {}
        return httpx.Response(status, content=body, headers=headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def image_server():
    return ImageServer()


@pytest.fixture
def fetcher(image_server):
    from app.services.report.fetch import ImageFetcher
    return ImageFetcher(httpx.AsyncClient(transport=image_server.transport))


# ---------------------------------------------------------------------------
# Mapping table
# ---------------------------------------------------------------------------

MAPPING_DATA = {
    "report_data_cells": {
        "corporation": [{"sheet": "表紙", "cell": "C5"}, {"sheet": "調査概要", "cell": "C3"}],
        "documentType": {"sheet": "表紙", "cell": "C3"},
        "surveySubType": [{"sheet": "表紙", "cell": "H3"}],
        "surveyDate": [{"sheet": "表紙", "cell": "C7"}],
        "address": [{"sheet": "調査概要", "cell": "C5"}],
        "surveyor": [{"sheet": "表紙", "cell": "C9"}, {"sheet": "存在しないシート", "cell": "A1"}],
    },
    "completion_drawings": {
        "tags": ["T", "外観"],
        "mappings": {
            "T": [
                {"sheet": "光配線写真①", "image": {"cell": "B4", "width": 320, "height": 240},
                 "memo": {"cell": "B20"}},
                {"sheet": "系統図", "image": {"cell": "A1", "width": 160, "height": 120}},
            ],
            "外観": {"sheet": "光配線写真②", "image": {"cell": "G4", "width": 320, "height": 240},
                   "memo": {"cell": "G20"}},
        },
    },
    "survey_report_FTTH": {
        "tags": ["外観", "EPS"],
        "mappings": {
            "外観": {"sheet": "光配線写真①", "image": {"cell": "B4", "width": 320, "height": 240}},
        },
    },
    "system_diagram_symbols": {
        "Mark": [
            {"sheet": "系統図", "image_path": "mark.png", "cell": "C5", "width": 50, "height": 50},
            {"sheet": "表紙", "image_path": "mark.png", "cell": "J12", "width": 30, "height": 30},
        ],
        "ONU": {"sheet": "系統図", "image_path": "https://symbols.example.com/onu.png",
                "cell": "F5", "width": 50, "height": 50},
        "プラグ": {"sheet": "系統図", "image_path": "missing.png", "cell": "F9", "width": 40, "height": 40},
        "幽霊": {"sheet": "無いシート", "image_path": "mark.png", "cell": "A1", "width": 40, "height": 40},
    },
}

TEMPLATE_SHEETS = ["表紙", "調査概要", "光配線写真①", "光配線写真②", "系統図"]


@pytest.fixture
def mapping_data():
    import copy
    return copy.deepcopy(MAPPING_DATA)


@pytest.fixture
def mapping_table(mapping_data):
    from app.schemas.mapping import MappingTable
    return MappingTable.model_validate(mapping_data)


# ---------------------------------------------------------------------------
# Templates, symbols and the sink
# ---------------------------------------------------------------------------

def build_workbook(sheets=TEMPLATE_SHEETS):
    from openpyxl import Workbook
    wb = Workbook()
    wb.remove(wb.active)
    for name in sheets:
        wb.create_sheet(name)
    return wb


@pytest.fixture
def templates_dir(tmp_path):
    from app.services.report.resolver import COMPLETION_DRAWINGS_TEMPLATE, SURVEY_REPORT_TEMPLATES
    root = tmp_path / "templates"
    root.mkdir()
    for name in [COMPLETION_DRAWINGS_TEMPLATE, SURVEY_REPORT_TEMPLATES["FTTH"]]:
        build_workbook().save(root / name)
    (root / "Acme").mkdir()
    return root


@pytest.fixture
def symbols_dir(tmp_path, png_bytes):
    root = tmp_path / "symbols"
    root.mkdir()
    (root / "mark.png").write_bytes(png_bytes)
    return root


class MemorySink:
    def __init__(self):
        self.saved = {}

    def save(self, content, suggested_path):
        from app.services.report.sink import StoredReport
        self.saved[suggested_path] = content
        return StoredReport(url=f"memory://{suggested_path}", path=suggested_path)


@pytest.fixture
def memory_sink():
    return MemorySink()


class FakePhotoSource:
    def __init__(self, records=()):
        self.records = list(records)
        self.queries = []

    def query(self, identity):
        self.queries.append(identity)
        return list(self.records)


@pytest.fixture
def photo_source():
    return FakePhotoSource()


@pytest.fixture
def resources(mapping_table, templates_dir, fetcher, memory_sink, symbols_dir):
    from app.services.report.generator import ReportResources
    from app.services.report.templates import TemplateStore
    return ReportResources(
        mapping=mapping_table,
        templates=TemplateStore(templates_dir),
        fetcher=fetcher,
        sink=memory_sink,
        symbols_dir=symbols_dir,
    )


def load_saved(sink: MemorySink):
    """Reload the single workbook a MemorySink received."""
    from openpyxl import load_workbook
    assert len(sink.saved) == 1
    (content,) = sink.saved.values()
    return load_workbook(io.BytesIO(content))


def image_anchors(ws):
    return sorted((img.anchor._from.col, img.anchor._from.row) for img in ws._images)
