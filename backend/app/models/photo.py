# backend/app/models/photo.py
from sqlalchemy import Integer, Column, String, DateTime, JSON, Text, Index
from datetime import datetime, timezone
from .base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Photo(Base):
    __tablename__ = "photos"
    id = Column(Integer, primary_key=True)
    # 調査の識別キー（すべて等値一致で検索する）
    corporation = Column(String, nullable=False)
    document_type = Column(String, nullable=False)  # completion_drawings|survey_report
    survey_sub_type = Column(String, nullable=True)  # FTTH|introduction|migration
    survey_date = Column(String, nullable=False)
    surveyor = Column(String, nullable=False)

    tag = Column(String, nullable=False)
    image_url = Column(String, nullable=False)
    transcription = Column(Text, nullable=True)  # 音声メモの文字起こし
    diagram_symbols = Column(JSON, nullable=True)  # ["ONU", ...]
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        Index("ix_photos_identity", "corporation", "document_type", "survey_date", "surveyor"),
    )
