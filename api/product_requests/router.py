"""
Product-request API endpoints.

Submitting is public; listing and deciding are admin-only.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from core.db import Database, get_db

from . import schemas, service

router = APIRouter()


@router.post("/product-requests")
async def submit_product_request(
    payload: schemas.ProductRequestIn,
    db: Database = Depends(get_db),
) -> dict:
    return await service.submit_request(db, payload)


@router.get("/product-requests")
async def list_product_requests(
    status: str | None = Query(default=None),
    db: Database = Depends(get_db),
    _: dict = Depends(auth_dependencies.require_admin),
) -> list[dict]:
    return await service.list_requests(db, status=status)


@router.put("/product-requests/{request_id}")
async def decide_product_request(
    request_id: int,
    payload: schemas.DecisionRequest,
    db: Database = Depends(get_db),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    return await service.decide_request(db, request_id, payload.status)
