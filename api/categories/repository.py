"""
Category persistence (read-only).
"""

from __future__ import annotations

from typing import Any

from core.db import Database


async def list_categories(db: Database) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT id, name, description
        FROM categories
        ORDER BY id
        """
    )
