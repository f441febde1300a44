import logging
import os
from contextlib import asynccontextmanager

import asyncpg
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from categories import router as categories_router
from core.db import Database, get_db
from core.errors import ServiceError, StoreError, ValidationFailed
from core.logging import configure_logging
from product_requests import router as product_requests_router
from products import router as products_router

logger = logging.getLogger("catalog.api")


def api_prefix() -> str:
    return os.environ.get("API_PREFIX", "").strip().rstrip("/")


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "*").strip()
    return [origin.strip() for origin in raw.split(",") if origin.strip()] or ["*"]


def expose_error_details() -> bool:
    # Production responses never echo driver messages.
    return os.environ.get("APP_ENV", "development").strip().lower() != "production"


def _validation_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors = []
    for error in exc.errors():
        # loc looks like ("body", "price") or ("query", "page").
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        errors.append(
            {
                "field": ".".join(loc) or "body",
                "message": str(error.get("msg", "Invalid value")),
            }
        )
    return errors


def _server_error(exc: Exception, *, message: str) -> JSONResponse:
    error = StoreError(message, details=str(exc) if expose_error_details() else None)
    return JSONResponse(status_code=error.status_code, content=error.to_body())


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One pool per process; closed on shutdown.
    app.state.db = await Database.connect()
    try:
        yield
    finally:
        await app.state.db.close()


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Product Catalog API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = _validation_errors(exc)
        logger.warning("request_invalid method=%s path=%s errors=%s", request.method, request.url.path, errors)
        error = ValidationFailed(errors)
        return JSONResponse(status_code=error.status_code, content=error.to_body())

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error("service_error method=%s path=%s error=%s", request.method, request.url.path, exc.message)
        elif exc.status_code == 400:
            logger.warning("request_invalid method=%s path=%s error=%s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(asyncpg.PostgresError)
    async def store_error_handler(request: Request, exc: asyncpg.PostgresError):
        logger.exception("store_error method=%s path=%s", request.method, request.url.path)
        return _server_error(exc, message="Server error")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
        return _server_error(exc, message="Internal server error")

    prefix = api_prefix()
    app.include_router(products_router.router, prefix=prefix, tags=["products"])
    app.include_router(categories_router.router, prefix=prefix, tags=["categories"])
    app.include_router(product_requests_router.router, prefix=prefix, tags=["product-requests"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/health/db")
    async def health_db(db: Database = Depends(get_db)) -> dict:
        await db.fetch_one("SELECT 1 AS ok")
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.environ.get("HOST", "0.0.0.0").strip() or "0.0.0.0",
        port=int(os.environ.get("PORT", "3000").strip() or "3000"),
    )
