# backend/app/api/routers/photos.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.db import get_db
from app.models.photo import Photo
from app.schemas.commons import DocumentType, SurveySubType
from app.schemas.photo import PhotoIn, PhotoOut
from app.services.records.photos import SqlPhotoSource, SurveyIdentity

router = APIRouter()


def _to_out(p: Photo) -> PhotoOut:
    return PhotoOut(
        id=p.id,
        corporation=p.corporation,
        document_type=p.document_type,
        survey_sub_type=p.survey_sub_type,
        survey_date=p.survey_date,
        surveyor=p.surveyor,
        tag=p.tag,
        image_url=p.image_url,
        transcription=p.transcription,
        diagram_symbols=list(p.diagram_symbols or []),
        created_at=p.created_at,
    )


def identity_params(
    corporation: str,
    document_type: DocumentType = Query(alias="documentType"),
    survey_date: str = Query(alias="surveyDate"),
    surveyor: str = Query(),
    survey_sub_type: Optional[SurveySubType] = Query(default=None, alias="surveySubType"),
) -> SurveyIdentity:
    # completion_drawings はサブタイプを持たない
    if document_type != "survey_report":
        survey_sub_type = None
    return SurveyIdentity(
        corporation=corporation,
        document_type=document_type,
        survey_sub_type=survey_sub_type,
        survey_date=survey_date,
        surveyor=surveyor,
    )


@router.get("/ping")
def ping():
    return {"ok": True, "router": "photos"}


@router.post("", response_model=PhotoOut, status_code=201)
@router.post("/", response_model=PhotoOut, status_code=201, include_in_schema=False)
def create_photo(payload: PhotoIn, db: Session = Depends(get_db)) -> PhotoOut:
    sub_type = payload.survey_sub_type if payload.document_type == "survey_report" else None
    obj = Photo(
        corporation=payload.corporation,
        document_type=payload.document_type,
        survey_sub_type=sub_type,
        survey_date=payload.survey_date,
        surveyor=payload.surveyor,
        tag=payload.tag,
        image_url=payload.image_url,
        transcription=payload.transcription or None,
        diagram_symbols=payload.diagram_symbols,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return _to_out(obj)


@router.get("", response_model=list[PhotoOut])
@router.get("/", response_model=list[PhotoOut], include_in_schema=False)
def list_photos(identity: SurveyIdentity = Depends(identity_params), db: Session = Depends(get_db)):
    return [_to_out(p) for p in SqlPhotoSource(db).rows(identity)]


@router.get("/uploaded-tags")
def uploaded_tags(identity: SurveyIdentity = Depends(identity_params), db: Session = Depends(get_db)) -> list[str]:
    """アップロード済みのタグ（タグ選択で「済」表示に使う）。"""
    return sorted({p.tag for p in SqlPhotoSource(db).rows(identity)})


@router.delete("/{photo_id}")
def delete_photo(photo_id: int, db: Session = Depends(get_db)):
    p = db.get(Photo, photo_id)
    if not p:
        raise HTTPException(status_code=404, detail="photo not found")
    db.delete(p)
    db.commit()
    return {"ok": True}
