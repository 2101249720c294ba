"""
test_excel.py — cell writing and image anchoring helpers.
"""

import pytest
from openpyxl import Workbook
from openpyxl.drawing.spreadsheet_drawing import OneCellAnchor
from openpyxl.utils.units import pixels_to_EMU

from app.services.report.excel import anchor_marker, embed_image, write_cell


@pytest.mark.parametrize(
    "cell, expected",
    [("A1", (0, 0)), ("B4", (1, 3)), ("C5", (2, 4)), ("AA10", (26, 9))],
)
def test_anchor_is_zero_based(cell, expected):
    marker = anchor_marker(cell)
    assert (marker.col, marker.row) == expected


def test_write_cell_plain():
    ws = Workbook().active
    write_cell(ws, "C5", "Acme")
    assert ws["C5"].value == "Acme"


def test_write_cell_into_merged_range_targets_top_left():
    ws = Workbook().active
    ws.merge_cells("B2:F3")
    write_cell(ws, "D3", "タイトル")
    assert ws["B2"].value == "タイトル"


def test_embed_image_uses_declared_size_not_native(png_bytes):
    ws = Workbook().active
    img = embed_image(ws, png_bytes, "png", "A1", 320, 240)
    assert ws._images == [img]
    assert isinstance(img.anchor, OneCellAnchor)
    assert (img.anchor._from.col, img.anchor._from.row) == (0, 0)
    assert img.anchor.ext.cx == pixels_to_EMU(320)
    assert img.anchor.ext.cy == pixels_to_EMU(240)
    assert (img.width, img.height) == (320, 240)
    assert img.format == "png"


def test_embed_image_rejects_non_image_bytes():
    ws = Workbook().active
    with pytest.raises(OSError):
        embed_image(ws, b"<html>not an image</html>", "jpeg", "A1", 10, 10)
    assert ws._images == []


def test_embed_image_without_format_uses_decoded_format(jpeg_bytes):
    ws = Workbook().active
    img = embed_image(ws, jpeg_bytes, None, "B2", 16, 16)
    assert img.format == "jpeg"
