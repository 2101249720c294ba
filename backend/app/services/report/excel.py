# backend/app/services/report/excel.py
"""openpyxl ワークシートへの書込みと画像の貼り付け。"""
from io import BytesIO
from typing import Optional

from openpyxl.drawing.image import Image as XLImage
from openpyxl.drawing.spreadsheet_drawing import AnchorMarker, OneCellAnchor
from openpyxl.drawing.xdr import XDRPositiveSize2D
from openpyxl.utils.cell import coordinate_to_tuple
from openpyxl.utils.units import pixels_to_EMU
from PIL import Image as PILImage

# Excel にそのまま格納できる形式
EXCEL_IMAGE_FORMATS = ("gif", "jpeg", "png")

# 1件の画像が読めないときに出る例外（DecompressionBombError は OSError ではない）
IMAGE_ERRORS = (OSError, ValueError, PILImage.DecompressionBombError)


def anchor_marker(cell: str) -> AnchorMarker:
    """セル番地（1始まり）を画像アンカー（0始まり）に変換する。"""
    row, col = coordinate_to_tuple(cell)
    return AnchorMarker(col=col - 1, row=row - 1)


def write_cell(ws, cell: str, value) -> None:
    target = ws[cell]
    # 結合セルは左上のセルにしか書けない
    for rng in ws.merged_cells.ranges:
        if cell in rng:
            target = ws.cell(row=rng.min_row, column=rng.min_col)
            break
    target.value = value


def to_png(content: bytes) -> bytes:
    with PILImage.open(BytesIO(content)) as im:
        if im.mode not in ("1", "L", "LA", "P", "RGB", "RGBA"):
            im = im.convert("RGBA")
        buf = BytesIO()
        im.save(buf, format="PNG")
    return buf.getvalue()


def embed_image(ws, content: bytes, image_format: Optional[str], cell: str, width: float, height: float) -> XLImage:
    """画像を cell に固定サイズ（width×height px）で貼る。

    image_format（Content-Type 由来）が無ければ Pillow の判定した形式を使う。
    WebP や BMP など Excel が扱えない形式は PNG に変換してから貼る。
    画像として読めない場合は IMAGE_ERRORS のいずれかが出る。
    """
    img = XLImage(BytesIO(content))
    detected = (img.format or "").lower()
    if detected not in EXCEL_IMAGE_FORMATS:
        img = XLImage(BytesIO(to_png(content)))
        img.format = "png"
    elif image_format in EXCEL_IMAGE_FORMATS:
        img.format = image_format
    else:
        img.format = detected
    img.width = width
    img.height = height
    size = XDRPositiveSize2D(pixels_to_EMU(width), pixels_to_EMU(height))
    img.anchor = OneCellAnchor(_from=anchor_marker(cell), ext=size)
    ws.add_image(img)
    return img
