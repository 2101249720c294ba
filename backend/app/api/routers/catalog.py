# backend/app/api/routers/catalog.py
from fastapi import APIRouter, Depends, Request

from app.api.deps import get_catalog, get_resources
from app.services.report.mapping import Catalog, DEFAULT_TAGS_KEY

router = APIRouter()


@router.get("/tags")
def list_tags(mapping_key: str = DEFAULT_TAGS_KEY, catalog: Catalog = Depends(get_catalog)) -> list[str]:
    return catalog.list_tags(mapping_key)


@router.get("/symbol-names")
def list_symbol_names(catalog: Catalog = Depends(get_catalog)) -> list[str]:
    return catalog.list_symbol_names()


@router.get("/symbols")
def list_symbols(catalog: Catalog = Depends(get_catalog)):
    return catalog.list_symbol_details()


@router.get("/corporations")
def list_corporations(request: Request) -> list[str]:
    return get_resources(request).templates.list_corporations()
