"""
Product listing query builder.

Turns optional filter/sort/pagination inputs into one parameterized SELECT.
Nothing here touches the database: `build_product_listing` returns the SQL
text and the positional args, and the repository runs them.

Rules:
- filters are AND-ed; an absent filter is simply left out
- args are bound in the order the clauses were appended, then LIMIT, OFFSET
- sort column and direction are looked up in fixed maps, never copied from input
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from core.errors import InvalidParameter

PRODUCT_COLUMNS = "id, name, description, price, category_id, image_url, affiliate_url, address"

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

# Accepted `sort_by` values -> trusted column identifiers.
SORT_COLUMNS = {
    "id": "id",
    "name": "name",
    "price": "price",
    "category_id": "category_id",
}

SORT_DIRECTIONS = {
    "asc": "ASC",
    "desc": "DESC",
}


@dataclass(frozen=True)
class ProductFilters:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    category_id: int | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    sort_by: str = "id"
    order: str = "ASC"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_price(field: str, raw: str | None) -> Decimal | None:
    """
    Parse a price bound from a query string value.

    Empty or missing means "no bound". Anything that is not a finite,
    non-negative number raises InvalidParameter naming the field.
    """
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None

    try:
        value = Decimal(text)
    except InvalidOperation as exc:
        raise InvalidParameter(field, f"Invalid {field}") from exc

    if not value.is_finite() or value < 0:
        raise InvalidParameter(field, f"Invalid {field}")
    return value


def sort_column(sort_by: str | None) -> str:
    key = (sort_by or "").strip().lower() or "id"
    column = SORT_COLUMNS.get(key)
    if column is None:
        raise InvalidParameter(
            "sort_by",
            f"Invalid sort_by. Allowed: {sorted(SORT_COLUMNS)}",
        )
    return column


def sort_direction(order: str | None) -> str:
    key = (order or "").strip().lower() or "asc"
    direction = SORT_DIRECTIONS.get(key)
    if direction is None:
        raise InvalidParameter("order", "Invalid order. Must be ASC or DESC.")
    return direction


def make_filters(
    *,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
    category_id: int | None = None,
    min_price: str | None = None,
    max_price: str | None = None,
    sort_by: str | None = None,
    order: str | None = None,
) -> ProductFilters:
    """
    Validate raw request inputs. Raises before any SQL exists.
    """
    if page < 1:
        raise InvalidParameter("page", "page must be a positive integer")
    if limit < 1 or limit > MAX_LIMIT:
        raise InvalidParameter("limit", f"limit must be between 1 and {MAX_LIMIT}")

    return ProductFilters(
        page=page,
        limit=limit,
        category_id=category_id,
        min_price=parse_price("min_price", min_price),
        max_price=parse_price("max_price", max_price),
        sort_by=sort_column(sort_by),
        order=sort_direction(order),
    )


def build_product_listing(filters: ProductFilters) -> tuple[str, list[Any]]:
    conditions: list[str] = []
    args: list[Any] = []

    def bind(value: Any) -> str:
        args.append(value)
        return f"${len(args)}"

    if filters.category_id is not None:
        conditions.append(f"category_id = {bind(filters.category_id)}")
    if filters.min_price is not None:
        conditions.append(f"price >= {bind(filters.min_price)}")
    if filters.max_price is not None:
        conditions.append(f"price <= {bind(filters.max_price)}")

    # Re-check against the maps so a hand-built ProductFilters can't smuggle text in.
    column = sort_column(filters.sort_by)
    direction = sort_direction(filters.order)

    sql = f"SELECT {PRODUCT_COLUMNS} FROM products"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)

    sql += f" ORDER BY {column} {direction}"
    if column != "id":
        sql += ", id ASC"

    sql += f" LIMIT {bind(filters.limit)} OFFSET {bind(filters.offset)}"
    return sql, args


def escape_like(text: str) -> str:
    """
    Escape LIKE wildcards so user input matches literally (used with ESCAPE '\\').
    """
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_pattern(query: str | None) -> str:
    """
    Wrap the search text in % for ILIKE. The text itself is bound as sent;
    only a missing or empty query is rejected.
    """
    if not query:
        raise InvalidParameter("query", "Search query is required")
    return f"%{escape_like(query)}%"
