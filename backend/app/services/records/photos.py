# backend/app/services/records/photos.py
from dataclasses import dataclass
from typing import Optional, Protocol
import logging

from sqlalchemy.orm import Session

from app.models.photo import Photo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SurveyIdentity:
    corporation: str
    document_type: str
    survey_sub_type: Optional[str]
    survey_date: str
    surveyor: str


@dataclass(frozen=True)
class PhotoRecord:
    tag: str
    image_url: str
    transcription: Optional[str] = None
    diagram_symbols: tuple[str, ...] = ()

    @classmethod
    def from_row(cls, row: Photo) -> "PhotoRecord":
        return cls(
            tag=row.tag,
            image_url=row.image_url or "",
            transcription=row.transcription or None,
            diagram_symbols=tuple(row.diagram_symbols or ()),
        )


class PhotoRecordSource(Protocol):
    def query(self, identity: SurveyIdentity) -> list[PhotoRecord]: ...


def identity_filter(query, identity: SurveyIdentity):
    """調査の識別キーすべてで等値一致させる（サブタイプ無しは NULL と一致）。"""
    return query.filter(
        Photo.corporation == identity.corporation,
        Photo.document_type == identity.document_type,
        Photo.survey_sub_type == identity.survey_sub_type,
        Photo.survey_date == identity.survey_date,
        Photo.surveyor == identity.surveyor,
    )


class SqlPhotoSource:
    def __init__(self, db: Session):
        self.db = db

    def rows(self, identity: SurveyIdentity) -> list[Photo]:
        q = identity_filter(self.db.query(Photo), identity)
        return q.order_by(Photo.id.asc()).all()

    def query(self, identity: SurveyIdentity) -> list[PhotoRecord]:
        rows = self.rows(identity)
        logger.info("Fetched %d photos for %s / %s", len(rows), identity.corporation, identity.survey_date)
        return [PhotoRecord.from_row(r) for r in rows]
