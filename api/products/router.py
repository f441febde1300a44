"""
Product API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from core.db import Database, get_db

from . import query, schemas, service

router = APIRouter()


@router.get("/products")
async def list_products(
    page: int = Query(query.DEFAULT_PAGE, ge=1),
    limit: int = Query(query.DEFAULT_LIMIT, ge=1, le=query.MAX_LIMIT),
    category_id: int | None = Query(default=None),
    # Prices stay strings here so malformed values get our own 400 message.
    min_price: str | None = Query(default=None),
    max_price: str | None = Query(default=None),
    sort_by: str = Query(default="id"),
    order: str = Query(default="ASC"),
    db: Database = Depends(get_db),
) -> list[dict]:
    return await service.list_products(
        db,
        page=page,
        limit=limit,
        category_id=category_id,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        order=order,
    )


@router.get("/products/category/{category_id}")
async def list_products_in_category(
    category_id: int,
    db: Database = Depends(get_db),
) -> list[dict]:
    return await service.products_in_category(db, category_id)


@router.get("/products/search")
async def search_products(
    search_query: str | None = Query(default=None, alias="query", max_length=500),
    db: Database = Depends(get_db),
) -> list[dict]:
    """
    Case-insensitive substring search over name and description.
    """
    return await service.search_products(db, search_query)


@router.post("/products")
async def create_product(
    payload: schemas.ProductIn,
    db: Database = Depends(get_db),
) -> dict:
    return await service.create_product(db, payload)


@router.put("/products/{product_id}")
async def update_product(
    product_id: int,
    payload: schemas.ProductIn,
    db: Database = Depends(get_db),
) -> dict:
    return await service.update_product(db, product_id, payload)


@router.delete("/products/{product_id}")
async def delete_product(
    product_id: int,
    db: Database = Depends(get_db),
) -> dict:
    return await service.delete_product(db, product_id)
