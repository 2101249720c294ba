# backend/app/config.py
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os

# backend/app/config.py → ../../.. = <repo root>
REPO_ROOT = Path(__file__).resolve().parents[2]


def _default_data_dir() -> Path:
    # コンテナでは /app/data、ローカル開発では repo 直下の data
    container_data = Path("/app/data")
    if container_data.exists():
        return container_data
    return REPO_ROOT / "data"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    database_url: str
    templates_dir: Path
    mapping_path: Path
    symbols_dir: Path
    symbol_base_url: Optional[str] = None
    public_base_url: str = ""
    image_fetch_timeout: Optional[float] = None
    log_level: str = "INFO"
    log_json: bool = True

    @property
    def reports_dir(self) -> Path:
        return self.data_dir / "reports"

    @classmethod
    def from_env(cls) -> "Settings":
        data_dir = Path(os.getenv("DATA_DIR") or _default_data_dir())
        # DATABASE_URL が指定されていれば優先、なければ SQLite
        database_url = os.getenv("DATABASE_URL") or f"sqlite:///{data_dir / 'app.db'}"
        timeout_raw = os.getenv("IMAGE_FETCH_TIMEOUT")
        return cls(
            data_dir=data_dir,
            database_url=database_url,
            templates_dir=Path(os.getenv("TEMPLATES_DIR") or REPO_ROOT / "templates"),
            mapping_path=Path(os.getenv("MAPPING_PATH") or REPO_ROOT / "mapping.json"),
            symbols_dir=Path(os.getenv("SYMBOLS_DIR") or REPO_ROOT / "symbols"),
            symbol_base_url=os.getenv("SYMBOL_BASE_URL") or None,
            public_base_url=(os.getenv("PUBLIC_BASE_URL") or "").rstrip("/"),
            image_fetch_timeout=float(timeout_raw) if timeout_raw else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=_env_bool("LOG_JSON", True),
        )
