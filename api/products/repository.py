"""
Product persistence (raw SQL).

Every function takes the executor first: the `Database` handle, or a
`Connection` from `Database.transaction()` when the caller needs atomicity.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from core.db import Connection, Database

from . import query

logger = logging.getLogger(__name__)

Executor = Database | Connection


async def list_products(db: Executor, filters: query.ProductFilters) -> list[dict[str, Any]]:
    sql, args = query.build_product_listing(filters)
    logger.debug("product_listing sql=%s args=%s", sql, args)
    return await db.fetch_all(sql, *args)


async def list_products_by_category(db: Executor, category_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {query.PRODUCT_COLUMNS}
        FROM products
        WHERE category_id = $1
        ORDER BY id
        """,
        category_id,
    )


async def search_products(db: Executor, pattern: str) -> list[dict[str, Any]]:
    """
    Case-insensitive substring match over name and description.
    `pattern` is already wrapped in % and LIKE-escaped (see query.search_pattern).
    """
    return await db.fetch_all(
        f"""
        SELECT {query.PRODUCT_COLUMNS}
        FROM products
        WHERE name ILIKE $1 ESCAPE '\\'
           OR description ILIKE $1 ESCAPE '\\'
        ORDER BY id
        """,
        pattern,
    )


async def insert_product(
    db: Executor,
    *,
    name: str,
    description: str,
    price: Decimal,
    category_id: int,
    image_url: str,
    affiliate_url: str,
    address: str | None,
) -> dict[str, Any]:
    row = await db.fetch_one(
        f"""
        INSERT INTO products (name, description, price, category_id, image_url, affiliate_url, address)
        VALUES ($1, $2, $3, $4, $5, $6, $7)
        RETURNING {query.PRODUCT_COLUMNS}
        """,
        name,
        description,
        price,
        category_id,
        image_url,
        affiliate_url,
        address,
    )
    if row is None:
        raise RuntimeError("Failed to insert product.")
    return row


async def update_product(
    db: Executor,
    product_id: int,
    *,
    name: str,
    description: str,
    price: Decimal,
    category_id: int,
    image_url: str,
    affiliate_url: str,
    address: str | None,
) -> dict[str, Any] | None:
    """
    Replace all mutable fields. Returns None when no row has this id.
    """
    return await db.fetch_one(
        f"""
        UPDATE products
        SET name = $1,
            description = $2,
            price = $3,
            category_id = $4,
            image_url = $5,
            affiliate_url = $6,
            address = $7
        WHERE id = $8
        RETURNING {query.PRODUCT_COLUMNS}
        """,
        name,
        description,
        price,
        category_id,
        image_url,
        affiliate_url,
        address,
        product_id,
    )


async def delete_product(db: Executor, product_id: int) -> bool:
    status = await db.execute("DELETE FROM products WHERE id = $1", product_id)
    # asyncpg returns the command tag, e.g. "DELETE 1".
    return status.rsplit(" ", 1)[-1] != "0"
