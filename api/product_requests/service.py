"""
Product-request moderation.

Lifecycle: a user submits a request (status "pending"); an admin decides it
once, "approved" or "rejected". Approval also creates the product. Both
writes of a decision share one transaction.
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg

from core.db import Database
from core.errors import Conflict, InvalidParameter, NotFound
from products import repository as product_repository
from products.service import category_violation

from . import repository, schemas

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = (
    "name",
    "description",
    "price",
    "category_id",
    "image_url",
    "affiliate_url",
    "address",
)


async def submit_request(db: Database, payload: schemas.ProductRequestIn) -> dict[str, Any]:
    try:
        return await repository.insert_request(db, **payload.model_dump())
    except asyncpg.ForeignKeyViolationError as exc:
        raise category_violation() from exc


async def list_requests(db: Database, *, status: str | None = None) -> list[dict[str, Any]]:
    if status is not None and status not in schemas.STATUSES:
        raise InvalidParameter(
            "status",
            f"Invalid status. Allowed: {', '.join(schemas.STATUSES)}",
        )
    return await repository.list_requests(db, status=status)


def validate_decision(status: str | None) -> str:
    if status not in schemas.DECISIONS:
        raise InvalidParameter(
            "status",
            'Invalid status. Status must be "approved" or "rejected".',
        )
    return status


async def decide_request(db: Database, request_id: int, status: str | None) -> dict[str, Any]:
    decision = validate_decision(status)

    product_id: int | None = None
    try:
        async with db.transaction() as conn:
            request_row = await repository.get_request_for_update(conn, request_id)
            if request_row is None:
                raise NotFound("Product request not found")

            current = str(request_row["status"])
            if current != schemas.PENDING:
                raise Conflict(f"Product request is already {current}")

            if decision == schemas.APPROVED:
                product_row = await product_repository.insert_product(
                    conn,
                    **{field: request_row[field] for field in PRODUCT_FIELDS},
                )
                product_id = int(product_row["id"])

            await repository.set_request_status(conn, request_id, decision)
    except asyncpg.ForeignKeyViolationError as exc:
        raise category_violation() from exc

    logger.info(
        "product_request_decided id=%s status=%s product_id=%s",
        request_id,
        decision,
        product_id,
    )
    return {
        "message": f"Product request {decision}",
        "id": request_id,
        "status": decision,
        "product_id": product_id,
    }
