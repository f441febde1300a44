"""
Product business logic.

Scope:
- listing with filters/sort/pagination (see `query.py`)
- category listing and substring search
- create / replace / delete
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg

from core.db import Database
from core.errors import InvalidParameter, NotFound

from . import query, repository, schemas

logger = logging.getLogger(__name__)


def category_violation() -> InvalidParameter:
    return InvalidParameter("category_id", "Category ID does not reference an existing category")


async def list_products(
    db: Database,
    *,
    page: int = query.DEFAULT_PAGE,
    limit: int = query.DEFAULT_LIMIT,
    category_id: int | None = None,
    min_price: str | None = None,
    max_price: str | None = None,
    sort_by: str | None = None,
    order: str | None = None,
) -> list[dict[str, Any]]:
    # Validation happens first; bad input never reaches the store.
    filters = query.make_filters(
        page=page,
        limit=limit,
        category_id=category_id,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        order=order,
    )
    return await repository.list_products(db, filters)


async def products_in_category(db: Database, category_id: int) -> list[dict[str, Any]]:
    return await repository.list_products_by_category(db, category_id)


async def search_products(db: Database, search_query: str | None) -> list[dict[str, Any]]:
    pattern = query.search_pattern(search_query)
    return await repository.search_products(db, pattern)


async def create_product(db: Database, payload: schemas.ProductIn) -> dict[str, Any]:
    try:
        return await repository.insert_product(db, **payload.model_dump())
    except asyncpg.ForeignKeyViolationError as exc:
        raise category_violation() from exc


async def update_product(db: Database, product_id: int, payload: schemas.ProductIn) -> dict[str, Any]:
    try:
        row = await repository.update_product(db, product_id, **payload.model_dump())
    except asyncpg.ForeignKeyViolationError as exc:
        raise category_violation() from exc

    if row is None:
        raise NotFound("Product not found")
    return row


async def delete_product(db: Database, product_id: int) -> dict[str, str]:
    deleted = await repository.delete_product(db, product_id)
    if not deleted:
        logger.debug("product_delete_no_match product_id=%s", product_id)
    return {"message": "Product deleted"}
