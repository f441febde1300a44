"""
Product-request persistence (raw SQL).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from core.db import Connection, Database

Executor = Database | Connection

REQUEST_COLUMNS = (
    "id, user_id, name, description, price, category_id, image_url, affiliate_url, address, status"
)


async def insert_request(
    db: Executor,
    *,
    user_id: int,
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
        INSERT INTO product_requests
            (user_id, name, description, price, category_id, image_url, affiliate_url, address, status)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, 'pending')
        RETURNING {REQUEST_COLUMNS}
        """,
        user_id,
        name,
        description,
        price,
        category_id,
        image_url,
        affiliate_url,
        address,
    )
    if row is None:
        raise RuntimeError("Failed to insert product request.")
    return row


async def list_requests(db: Executor, *, status: str | None = None) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {REQUEST_COLUMNS}
        FROM product_requests
        WHERE ($1::text IS NULL OR status = $1)
        ORDER BY id
        """,
        status,
    )


async def get_request_for_update(db: Connection, request_id: int) -> dict[str, Any] | None:
    """
    Read a request and lock its row until the surrounding transaction ends,
    so two admins can't decide the same request concurrently.
    """
    return await db.fetch_one(
        f"""
        SELECT {REQUEST_COLUMNS}
        FROM product_requests
        WHERE id = $1
        FOR UPDATE
        """,
        request_id,
    )


async def set_request_status(db: Executor, request_id: int, status: str) -> None:
    await db.execute(
        """
        UPDATE product_requests
        SET status = $1
        WHERE id = $2
        """,
        status,
        request_id,
    )
