from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi import Request
from pathlib import Path

# モデル定義側の Base（app.models.base）を利用してメタデータを統一
from app.models.base import Base


def create_session_factory(database_url: str) -> sessionmaker:
    """DATABASE_URL からエンジンを作り、テーブルを作成した sessionmaker を返す。"""
    is_sqlite = database_url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    engine_kwargs = {}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # インメモリ DB は接続間で共有する
        engine_kwargs["poolclass"] = StaticPool
    elif is_sqlite:
        # ディレクトリ作成（存在しない場合）
        db_path = Path(database_url.replace("sqlite:///", "", 1))
        db_path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(database_url, connect_args=connect_args, **engine_kwargs)
    init_db(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine) -> None:
    # モデルモジュールを明示 import してメタデータ登録を確実化
    import app.models.photo  # noqa: F401
    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    db: Session = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
