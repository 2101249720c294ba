# backend/app/api/routers/report.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from app.api.deps import get_generator
from app.db import get_db
from app.schemas.commons import ErrorOut
from app.schemas.report import ReportRequest, ReportOut, GenerationReportOut
from app.services.records.photos import SqlPhotoSource
from app.services.report.errors import ReportError, ReportGenerationError
from app.services.report.generator import ReportGenerator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/generate",
    response_model=ReportOut,
    responses={400: {"model": ErrorOut}, 404: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
async def generate_report(
    payload: ReportRequest,
    db: Session = Depends(get_db),
    generator: ReportGenerator = Depends(get_generator),
) -> ReportOut:
    logger.info(
        "Report requested: %s / %s / %s",
        payload.corporation, payload.document_type, payload.survey_sub_type or "-",
    )
    try:
        result = await generator.generate(payload, SqlPhotoSource(db))
    except ReportError:
        raise
    except Exception as e:
        logger.exception("Unexpected error while generating report")
        raise ReportGenerationError(str(e) or e.__class__.__name__) from e

    return ReportOut(
        message="Report generated successfully!",
        download_url=result.download_url,
        file_name=result.file_name,
        report=GenerationReportOut(**result.report.to_dict()),
    )
