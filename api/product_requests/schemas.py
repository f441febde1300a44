"""
Product-request API schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from products.schemas import ProductIn

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"

STATUSES = (PENDING, APPROVED, REJECTED)
DECISIONS = (APPROVED, REJECTED)


class ProductRequestIn(ProductIn):
    user_id: int = Field(..., gt=0)


class DecisionRequest(BaseModel):
    # Kept as a plain string so "maybe" is reported as an invalid status,
    # not as a generic schema error.
    status: str | None = None
