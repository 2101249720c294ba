# backend/app/services/report/embed.py
"""写真（タグ）と系統図記号の画像をワークシートに貼り付ける。

どちらも1件ずつのベストエフォートで、取得や貼り付けに失敗したものは
EmbedOutcome に記録して次へ進む。帳票全体は止めない。
"""
from pathlib import Path
from typing import Iterable, Optional
from urllib.parse import quote
import logging
import unicodedata

from app.schemas.mapping import SymbolMapping, TagMapping, normalize_name
from app.services.records.photos import PhotoRecord
from .excel import IMAGE_ERRORS, embed_image, write_cell
from .fetch import FetchedImage, ImageFetcher, ImageFetchError
from .outcomes import EmbedOutcome

logger = logging.getLogger(__name__)

_SUFFIX_FORMATS = {".png": "png", ".jpg": "jpeg", ".jpeg": "jpeg", ".gif": "gif"}


class SymbolSourceMissing(Exception):
    pass


def _is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://"))


class PhotoEmbedder:
    def __init__(self, fetcher: ImageFetcher):
        self.fetcher = fetcher

    async def embed(self, workbook, tag_mappings: list[TagMapping], photo: PhotoRecord) -> list[EmbedOutcome]:
        outcomes: list[EmbedOutcome] = []
        fetched: Optional[FetchedImage] = None
        fetch_error: Optional[str] = None

        for mapping in tag_mappings:
            if mapping.sheet not in workbook.sheetnames:
                logger.warning("Worksheet '%s' not found for tag '%s'", mapping.sheet, photo.tag)
                outcomes.append(EmbedOutcome.skipped("photo", photo.tag, "worksheet not found", mapping.sheet))
                continue
            ws = workbook[mapping.sheet]

            image = mapping.image
            if image is not None and photo.image_url:
                # 同じ写真が複数シートに展開される場合も取得は1回
                if fetched is None and fetch_error is None:
                    try:
                        fetched = await self.fetcher.fetch(photo.image_url)
                    except ImageFetchError as e:
                        fetch_error = str(e)
                if fetch_error is not None:
                    logger.error("Failed to insert image for %s: %s", photo.tag, fetch_error)
                    outcomes.append(EmbedOutcome.failed("photo", photo.tag, fetch_error, mapping.sheet, image.cell))
                else:
                    try:
                        embed_image(ws, fetched.content, fetched.format, image.cell, image.width, image.height)
                    except IMAGE_ERRORS as e:
                        logger.error("Failed to insert image for %s: %s", photo.tag, e)
                        outcomes.append(EmbedOutcome.failed(
                            "photo", photo.tag, f"unreadable image: {e}", mapping.sheet, image.cell,
                        ))
                    else:
                        logger.debug("Inserted image for tag %s at %s!%s", photo.tag, mapping.sheet, image.cell)
                        outcomes.append(EmbedOutcome.embedded("photo", photo.tag, mapping.sheet, image.cell))
            elif image is not None:
                outcomes.append(EmbedOutcome.skipped("photo", photo.tag, "no imageUrl", mapping.sheet, image.cell))

            if photo.transcription and mapping.memo is not None:
                write_cell(ws, mapping.memo.cell, photo.transcription)
                outcomes.append(EmbedOutcome.embedded("memo", photo.tag, mapping.sheet, mapping.memo.cell))
        return outcomes


class SymbolEmbedder:
    def __init__(
        self,
        symbols: dict[str, list[SymbolMapping]],
        fetcher: ImageFetcher,
        symbols_dir: Path,
        symbol_base_url: Optional[str] = None,
    ):
        self.symbols = symbols
        self.fetcher = fetcher
        self.symbols_dir = Path(symbols_dir)
        self.symbol_base_url = symbol_base_url.rstrip("/") if symbol_base_url else None

    def lookup_key(self, name: str) -> Optional[str]:
        """マッピングのキーを返す。NFC で見つからなければ互換分解（全角英数など）も試す。"""
        key = normalize_name(name)
        if key in self.symbols:
            return key
        compat = unicodedata.normalize("NFKC", name).strip()
        if compat in self.symbols:
            return compat
        return None

    def resolve(self, names: Iterable[str]) -> tuple[list[str], list[str]]:
        """(マッピングのあるキー, 未知の名前) を、それぞれ重複なし・出現順で返す。"""
        known: list[str] = []
        unknown: list[str] = []
        for name in names:
            if not name or not name.strip():
                continue
            key = self.lookup_key(name)
            if key is None:
                normalized = normalize_name(name)
                if normalized not in unknown:
                    unknown.append(normalized)
            elif key not in known:
                known.append(key)
        return known, unknown

    async def embed(self, workbook, names: Iterable[str]) -> list[EmbedOutcome]:
        known, unknown = self.resolve(names)
        outcomes: list[EmbedOutcome] = []
        for name in unknown:
            logger.warning("No mapping found for symbol tag: '%s'", name)
            outcomes.append(EmbedOutcome.skipped("symbol", name, "no mapping"))

        for key in known:
            for mapping in self.symbols[key]:
                outcomes.append(await self._embed_one(workbook, key, mapping))
        return outcomes

    async def _embed_one(self, workbook, key: str, mapping: SymbolMapping) -> EmbedOutcome:
        if mapping.sheet not in workbook.sheetnames:
            logger.warning("Worksheet '%s' not found for symbol '%s'", mapping.sheet, key)
            return EmbedOutcome.skipped("symbol", key, "worksheet not found", mapping.sheet, mapping.cell)
        if not mapping.image_path:
            logger.warning("No 'image_path' found for symbol '%s'", key)
            return EmbedOutcome.skipped("symbol", key, "no image_path", mapping.sheet, mapping.cell)

        try:
            image = await self.load_image(mapping.image_path)
        except SymbolSourceMissing as e:
            logger.warning("Symbol image for '%s' not found: %s", key, e)
            return EmbedOutcome.skipped("symbol", key, str(e), mapping.sheet, mapping.cell)
        except ImageFetchError as e:
            logger.error("Failed to insert symbol %s: %s", key, e)
            return EmbedOutcome.failed("symbol", key, str(e), mapping.sheet, mapping.cell)

        try:
            embed_image(workbook[mapping.sheet], image.content, image.format, mapping.cell, mapping.width, mapping.height)
        except IMAGE_ERRORS as e:
            logger.error("Failed to insert symbol %s: %s", key, e)
            return EmbedOutcome.failed("symbol", key, f"unreadable image: {e}", mapping.sheet, mapping.cell)
        logger.debug("Inserted symbol %s at %s!%s", key, mapping.sheet, mapping.cell)
        return EmbedOutcome.embedded("symbol", key, mapping.sheet, mapping.cell)

    async def load_image(self, source: str) -> FetchedImage:
        if _is_remote(source):
            return await self.fetcher.fetch(source)

        path = Path(source)
        if not path.is_absolute():
            path = self.symbols_dir / path
        if path.is_file():
            fmt = _SUFFIX_FORMATS.get(path.suffix.lower())
            return FetchedImage(content=path.read_bytes(), format=fmt)

        if self.symbol_base_url:
            url = f"{self.symbol_base_url}/{quote(source.lstrip('/'))}"
            return await self.fetcher.fetch(url)
        raise SymbolSourceMissing(f"{path} does not exist")
