# backend/app/services/report/fetch.py
from dataclasses import dataclass
from typing import Optional
import logging

import httpx

logger = logging.getLogger(__name__)

_CONTENT_TYPE_FORMATS = {
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
    "image/pjpeg": "jpeg",
    "image/png": "png",
    "image/gif": "gif",
}


class ImageFetchError(Exception):
    pass


@dataclass(frozen=True)
class FetchedImage:
    content: bytes
    format: Optional[str]  # jpeg|png|gif, None なら画像の中身から判定


def image_format_from_content_type(content_type: Optional[str], default: Optional[str] = None) -> Optional[str]:
    if not content_type:
        return default
    mime = content_type.split(";", 1)[0].strip().lower()
    return _CONTENT_TYPE_FORMATS.get(mime, default)


class ImageFetcher:
    """画像 URL を取得する。1件の失敗は ImageFetchError として呼び出し側で握る。"""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def fetch(self, url: str, default_format: Optional[str] = None) -> FetchedImage:
        try:
            response = await self.client.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            raise ImageFetchError(f"Failed to fetch image {url}: {e}") from e
        if not response.is_success:
            raise ImageFetchError(
                f"Failed to fetch image {url}: {response.status_code} {response.reason_phrase}"
            )
        if not response.content:
            raise ImageFetchError(f"Empty response body for image {url}")
        fmt = image_format_from_content_type(response.headers.get("content-type"), default_format)
        logger.debug("Fetched %s (%d bytes, %s)", url, len(response.content), fmt)
        return FetchedImage(content=response.content, format=fmt)
