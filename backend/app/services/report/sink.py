# backend/app/services/report/sink.py
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import quote
import logging
import uuid

logger = logging.getLogger(__name__)

MAX_NAME_ATTEMPTS = 5


@dataclass(frozen=True)
class StoredReport:
    url: str
    path: str
    expires_at: Optional[datetime] = None  # None = 期限なし


class OutputSink(Protocol):
    def save(self, content: bytes, suggested_path: str) -> StoredReport: ...


class LocalOutputSink:
    """data ディレクトリに書き出し、/data の静的配信 URL を返す。

    既存ファイルは上書きしない。同名のファイルがあれば短い接尾辞を付けて保存する。
    """

    def __init__(self, data_dir: Path, public_base_url: str = ""):
        self.data_dir = Path(data_dir)
        self.public_base_url = public_base_url.rstrip("/")

    def save(self, content: bytes, suggested_path: str) -> StoredReport:
        relative = Path(suggested_path)
        if relative.is_absolute() or ".." in relative.parts:
            raise ValueError(f"invalid output path: {suggested_path}")
        (self.data_dir / relative).parent.mkdir(parents=True, exist_ok=True)

        candidate = relative
        for _ in range(MAX_NAME_ATTEMPTS):
            target = self.data_dir / candidate
            try:
                with open(target, "xb") as f:
                    f.write(content)
            except FileExistsError:
                logger.warning("Report %s already exists, retrying with a suffix", target)
                candidate = relative.with_name(f"{relative.stem}-{uuid.uuid4().hex[:6]}{relative.suffix}")
                continue
            url = f"{self.public_base_url}/data/{quote(candidate.as_posix())}"
            logger.info("Saved report to %s (%d bytes)", target, len(content))
            return StoredReport(url=url, path=str(target))
        raise FileExistsError(f"could not find a free name for {suggested_path}")
