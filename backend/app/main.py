from contextlib import asynccontextmanager
from typing import Optional
import logging

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routers import catalog, photos, report
from app.config import Settings
from app.db import create_session_factory
from app.logging_config import setup_logging
from app.services.report.errors import ReportError
from app.services.report.fetch import ImageFetcher
from app.services.report.generator import ReportResources
from app.services.report.mapping import load_mapping_table
from app.services.report.sink import LocalOutputSink
from app.services.report.templates import TemplateStore

logger = logging.getLogger("survey-report-api")


def create_app(settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    settings.reports_dir.mkdir(parents=True, exist_ok=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # 起動時に一度だけ読み込み、以降は読み取り専用で共有する
        app.state.session_factory = create_session_factory(settings.database_url)
        client = httpx.AsyncClient(timeout=settings.image_fetch_timeout, transport=transport)
        app.state.resources = ReportResources(
            mapping=load_mapping_table(settings.mapping_path),
            templates=TemplateStore(settings.templates_dir),
            fetcher=ImageFetcher(client),
            sink=LocalOutputSink(settings.data_dir, settings.public_base_url),
            symbols_dir=settings.symbols_dir,
            symbol_base_url=settings.symbol_base_url,
        )
        logger.info("Report resources loaded (templates: %s)", settings.templates_dir)
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="Survey Report API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ReportError)
    async def report_error_handler(request: Request, exc: ReportError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        fields = sorted({".".join(str(p) for p in err.get("loc", ())[1:]) for err in exc.errors()})
        return JSONResponse(
            status_code=400,
            content={
                "message": "Missing required parameters",
                "error": "invalid or missing fields: " + ", ".join(f for f in fields if f),
                "details": str(exc.errors()),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": detail, "error": detail},
            headers=getattr(exc, "headers", None),
        )

    @app.get("/health")
    def health():
        return {"ok": True}

    app.include_router(photos.router,  prefix="/photos",  tags=["photos"])
    app.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
    app.include_router(report.router,  prefix="/report",  tags=["report"])

    # /data を静的配信（生成した帳票の取得用）
    app.mount("/data", StaticFiles(directory=str(settings.data_dir)), name="data")
    return app


_settings = Settings.from_env()
setup_logging(level=_settings.log_level, json_output=_settings.log_json)
app = create_app(_settings)
