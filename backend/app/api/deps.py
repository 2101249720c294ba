"""FastAPI dependency injection — report resources built at startup."""
from fastapi import Request

from app.services.report.generator import ReportGenerator, ReportResources
from app.services.report.mapping import Catalog


def get_resources(request: Request) -> ReportResources:
    return request.app.state.resources


def get_generator(request: Request) -> ReportGenerator:
    return ReportGenerator(get_resources(request))


def get_catalog(request: Request) -> Catalog:
    return Catalog(get_resources(request).mapping)
