"""
Category API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from core.db import Database, get_db

from . import repository

router = APIRouter()


@router.get("/categories")
async def list_categories(db: Database = Depends(get_db)) -> list[dict]:
    return await repository.list_categories(db)
