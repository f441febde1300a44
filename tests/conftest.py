import copy
import os
import re
import sys
from contextlib import asynccontextmanager
from decimal import Decimal
from pathlib import Path

import asyncpg
import pytest
from fastapi.testclient import TestClient

API_DIR = Path(__file__).resolve().parents[1] / "api"
if str(API_DIR) not in sys.path:
    sys.path.insert(0, str(API_DIR))

os.environ.setdefault("JWT_SECRET", "catalog-test-secret-0123456789abcdef")
os.environ.setdefault("JWT_ALG", "HS256")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from auth import security
from core.db import get_db
from main import app
from products import query

_DEFAULTS = {"fetch_one": None, "fetch_all": [], "execute": "OK"}


class FakeDatabase:
    """
    Stands in for core.db.Database.

    Records every statement (whitespace-collapsed) with its args and asks
    `responder(method, sql, args)` for the result. A responder may also define
    begin/commit/rollback to follow transactions.
    """

    def __init__(self, responder=None):
        self.responder = responder
        self.calls = []
        self.events = []

    async def _run(self, method, sql, args):
        sql = " ".join(sql.split())
        self.calls.append((method, sql, args))
        if self.responder is None:
            return copy.deepcopy(_DEFAULTS[method])
        return self.responder(method, sql, args)

    async def fetch_one(self, sql, *args):
        return await self._run("fetch_one", sql, args)

    async def fetch_all(self, sql, *args):
        return await self._run("fetch_all", sql, args)

    async def execute(self, sql, *args):
        return await self._run("execute", sql, args)

    def _hook(self, name):
        hook = getattr(self.responder, name, None)
        if hook is not None:
            hook()

    @asynccontextmanager
    async def transaction(self):
        self.events.append("begin")
        self._hook("begin")
        try:
            yield self
        except BaseException:
            self.events.append("rollback")
            self._hook("rollback")
            raise
        self.events.append("commit")
        self._hook("commit")


class InMemoryCatalog:
    """
    A tiny responder that understands the statements the catalog issues,
    keeping products and product requests in lists. Transactions snapshot
    and restore both lists.
    """

    PRODUCT_FIELDS = ("name", "description", "price", "category_id", "image_url", "affiliate_url", "address")

    def __init__(self):
        self.products = []
        self.requests = []
        self.fail_on = None
        self._snapshot = None

    def begin(self):
        self._snapshot = (copy.deepcopy(self.products), copy.deepcopy(self.requests))

    def commit(self):
        self._snapshot = None

    def rollback(self):
        self.products, self.requests = self._snapshot
        self._snapshot = None

    def add_request(self, status="pending", **fields):
        row = {
            "id": len(self.requests) + 1,
            "user_id": 7,
            "name": "Desk Lamp",
            "description": "Warm LED lamp",
            "price": Decimal("24.90"),
            "category_id": 2,
            "image_url": "https://img.example.com/lamp.png",
            "affiliate_url": "https://shop.example.com/lamp",
            "address": None,
            "status": status,
        }
        row.update(fields)
        self.requests.append(row)
        return row

    def add_product(self, **fields):
        row = {
            "id": len(self.products) + 1,
            "name": "Widget",
            "description": "Plain widget",
            "price": Decimal("10.00"),
            "category_id": 1,
            "image_url": "https://img.example.com/widget.png",
            "affiliate_url": "https://shop.example.com/widget",
            "address": None,
        }
        row.update(fields)
        self.products.append(row)
        return row

    def _listing(self, sql, args):
        rows = list(self.products)
        for column, op, position in re.findall(r"(category_id|price) (=|>=|<=) \$(\d+)", sql):
            value = args[int(position) - 1]
            if op == "=":
                rows = [r for r in rows if r[column] == value]
            elif op == ">=":
                rows = [r for r in rows if r[column] >= value]
            else:
                rows = [r for r in rows if r[column] <= value]

        column, direction = re.search(r"ORDER BY (\w+) (ASC|DESC)", sql).groups()
        rows.sort(key=lambda r: r["id"])
        rows.sort(key=lambda r: r[column], reverse=direction == "DESC")

        limit, offset = args[-2], args[-1]
        return [dict(r) for r in rows[offset : offset + limit]]

    def _search(self, pattern):
        needle = re.sub(r"\\(.)", r"\1", pattern[1:-1]).casefold()
        return [
            dict(p)
            for p in self.products
            if needle in p["name"].casefold() or needle in p["description"].casefold()
        ]

    def __call__(self, method, sql, args):
        if self.fail_on and self.fail_on in sql:
            raise asyncpg.PostgresError("simulated store failure")

        if sql.startswith(f"SELECT {query.PRODUCT_COLUMNS} FROM products") and " LIMIT $" in sql:
            return self._listing(sql, args)

        if "name ILIKE $1 ESCAPE" in sql:
            return self._search(args[0])

        if sql.startswith("INSERT INTO products"):
            row = {"id": len(self.products) + 1, **dict(zip(self.PRODUCT_FIELDS, args))}
            self.products.append(row)
            return dict(row)

        if "FROM products WHERE category_id = $1" in sql:
            return [dict(p) for p in self.products if p["category_id"] == args[0]]

        if sql.startswith("INSERT INTO product_requests"):
            fields = ("user_id",) + self.PRODUCT_FIELDS
            row = {"id": len(self.requests) + 1, **dict(zip(fields, args)), "status": "pending"}
            self.requests.append(row)
            return dict(row)

        if "FROM product_requests WHERE ($1::text IS NULL" in sql:
            status = args[0]
            return [dict(r) for r in self.requests if status is None or r["status"] == status]

        if "FROM product_requests WHERE id = $1 FOR UPDATE" in sql:
            for row in self.requests:
                if row["id"] == args[0]:
                    return dict(row)
            return None

        if sql.startswith("UPDATE product_requests SET status = $1"):
            for row in self.requests:
                if row["id"] == args[1]:
                    row["status"] = args[0]
                    return "UPDATE 1"
            return "UPDATE 0"

        raise AssertionError(f"unexpected SQL: {sql}")


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def fake_db():
    return FakeDatabase()


@pytest.fixture()
def catalog():
    return InMemoryCatalog()


@pytest.fixture()
def catalog_db(catalog):
    return FakeDatabase(catalog)


def _client_for(db):
    app.dependency_overrides[get_db] = lambda: db
    # No context manager: the lifespan (real pool) never starts.
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def client(fake_db):
    yield _client_for(fake_db)
    app.dependency_overrides.clear()


@pytest.fixture()
def catalog_client(catalog_db):
    yield _client_for(catalog_db)
    app.dependency_overrides.clear()


@pytest.fixture()
def admin_headers():
    token = security.build_access_token(subject="moderator", role="admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def user_headers():
    token = security.build_access_token(subject="shopper", role="user")
    return {"Authorization": f"Bearer {token}"}
