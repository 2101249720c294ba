# backend/app/services/report/generator.py
"""テンプレート Excel に調査データ・写真・系統図記号を差し込んで保存する。"""
from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Callable, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from app.logging_config import report_context
from app.schemas.mapping import MappingTable
from app.schemas.report import ReportRequest
from app.services.records.photos import PhotoRecord, PhotoRecordSource, SurveyIdentity
from .embed import PhotoEmbedder, SymbolEmbedder
from .errors import ReportGenerationError
from .fetch import ImageFetcher
from .fields import write_field, write_photo_sheet_titles
from .outcomes import EmbedOutcome, EmbedStatus, GenerationReport
from .resolver import SURVEY_REPORT, ResolvedTemplate, resolve_template
from .sink import OutputSink
from .templates import TemplateStore

logger = logging.getLogger(__name__)

REPORTS_PREFIX = "reports"


@dataclass(frozen=True)
class ReportResources:
    """プロセス内で共有する読み取り専用の設定・クライアント一式。"""
    mapping: MappingTable
    templates: TemplateStore
    fetcher: ImageFetcher
    sink: OutputSink
    symbols_dir: Path
    symbol_base_url: Optional[str] = None


@dataclass(frozen=True)
class ReportArtifact:
    content: bytes
    file_name: str


@dataclass(frozen=True)
class GeneratedReport:
    file_name: str
    download_url: str
    report: GenerationReport


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def report_timestamp(now: datetime) -> str:
    return f"{now:%Y%m%dT%H%M%S}{now.microsecond // 1000:03d}Z"


def report_file_name(corporation: str, display_document_type: str, now: datetime) -> str:
    safe = corporation.replace("/", "_").replace("\\", "_")
    return f"{safe}_{display_document_type}_{report_timestamp(now)}.xlsx"


def serialize_workbook(workbook) -> bytes:
    buf = BytesIO()
    workbook.save(buf)
    return buf.getvalue()


class ReportGenerator:
    def __init__(self, resources: ReportResources, clock: Callable[[], datetime] = _utcnow):
        self.resources = resources
        self.clock = clock
        self.photo_embedder = PhotoEmbedder(resources.fetcher)
        self.symbol_embedder = SymbolEmbedder(
            resources.mapping.system_diagram_symbols,
            resources.fetcher,
            resources.symbols_dir,
            resources.symbol_base_url,
        )

    async def generate(self, request: ReportRequest, photo_source: PhotoRecordSource) -> GeneratedReport:
        # 設定エラー（400/404）はワークブックに触れる前に出す
        resolved = resolve_template(request.document_type, request.survey_sub_type)
        with report_context(corporation=request.corporation, mapping_key=resolved.mapping_key):
            return await self._generate(request, resolved, photo_source)

    async def _generate(
        self, request: ReportRequest, resolved: ResolvedTemplate, photo_source: PhotoRecordSource,
    ) -> GeneratedReport:
        # ファイル・DB の入出力はスレッドで実行し、イベントループを止めない
        workbook = await run_in_threadpool(self.resources.templates.open, resolved.template_file)
        logger.info("Generating report from %s", resolved.template_file)

        report = GenerationReport(warnings=list(resolved.warnings))
        report.extend(self.write_fields(workbook, request, resolved))

        identity = SurveyIdentity(
            corporation=request.corporation,
            document_type=request.document_type,
            survey_sub_type=resolved.survey_sub_type,
            survey_date=request.survey_date,
            surveyor=request.surveyor,
        )
        try:
            photos = await run_in_threadpool(photo_source.query, identity)
        except SQLAlchemyError as e:
            raise ReportGenerationError("Failed to query photo records", details=str(e)) from e

        report.extend(await self.embed_photos(workbook, resolved.mapping_key, photos, report))

        symbol_names = list(request.diagram_symbols)
        for photo in photos:
            symbol_names.extend(photo.diagram_symbols)
        report.extend(await self.symbol_embedder.embed(workbook, symbol_names))

        artifact = await run_in_threadpool(
            self.build_artifact, workbook, request.corporation, resolved.display_document_type,
        )
        try:
            stored = await run_in_threadpool(
                self.resources.sink.save, artifact.content, f"{REPORTS_PREFIX}/{artifact.file_name}",
            )
        except (OSError, ValueError) as e:
            raise ReportGenerationError("Failed to save report", details=str(e)) from e

        # 保存先で名前が変わることがある（衝突時の接尾辞）
        file_name = Path(stored.path).name
        logger.info(
            "Report generated: %d embedded, %d skipped, %d failed",
            report.count(EmbedStatus.EMBEDDED), report.count(EmbedStatus.SKIPPED), report.count(EmbedStatus.FAILED),
            extra={"file_name": file_name},
        )
        return GeneratedReport(file_name=file_name, download_url=stored.url, report=report)

    def write_fields(self, workbook, request: ReportRequest, resolved: ResolvedTemplate) -> list[EmbedOutcome]:
        table = self.resources.mapping
        outcomes = []
        outcomes += write_field(workbook, table, "corporation", request.corporation)
        outcomes += write_field(workbook, table, "surveyDate", request.survey_date)
        outcomes += write_field(workbook, table, "address", request.address)
        outcomes += write_field(workbook, table, "surveyor", request.surveyor)
        outcomes += write_field(workbook, table, "documentType", resolved.display_document_type)
        if request.document_type == SURVEY_REPORT and resolved.survey_sub_type:
            outcomes += write_field(workbook, table, "surveySubType", resolved.survey_sub_type)
        outcomes += write_photo_sheet_titles(workbook, request.corporation)
        return outcomes

    async def embed_photos(
        self, workbook, mapping_key: str, photos: list[PhotoRecord], report: GenerationReport,
    ) -> list[EmbedOutcome]:
        template = self.resources.mapping.template(mapping_key)
        if template is None:
            logger.warning("No 'mappings' found in mapping table for key '%s'", mapping_key)
            if photos:
                report.warnings.append(f"no photo mappings for '{mapping_key}'")
            return []

        outcomes = []
        # 同じタグの写真が複数あってもすべて処理する
        for photo in photos:
            tag_mappings = template.mappings.get(photo.tag)
            if not tag_mappings:
                logger.warning("No mapping found for photo tag '%s'", photo.tag)
                outcomes.append(EmbedOutcome.skipped("photo", photo.tag, "no mapping"))
                continue
            outcomes += await self.photo_embedder.embed(workbook, tag_mappings, photo)
        return outcomes

    def build_artifact(self, workbook, corporation: str, display_document_type: str) -> ReportArtifact:
        try:
            content = serialize_workbook(workbook)
        except Exception as e:
            logger.exception("Failed to serialize workbook")
            raise ReportGenerationError("Failed to write workbook", details=str(e)) from e
        return ReportArtifact(content=content, file_name=report_file_name(corporation, display_document_type, self.clock()))
