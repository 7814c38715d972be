"""FastAPI application: catalog CRUD, checkout, transactions and reports.

Each endpoint opens its own ``session_scope``. ``KasirError`` subclasses are
rendered as ``{"error": message}`` with the status code they carry.
"""

from __future__ import annotations

from typing import Annotated

from db.client import get_engine, session_scope
from fastapi import FastAPI, Query, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from . import catalog, reporting
from . import checkout as checkout_engine
from .config import Settings, load_settings
from .errors import KasirError
from .logging_setup import configure_logging, get_logger
from .schemas import (
    CategoryIn,
    CategoryOut,
    CheckoutRequest,
    ErrorBody,
    ProductIn,
    ProductOut,
    Report,
    TransactionOut,
)

logger = get_logger("kasir.web")

# Every KasirError renders as ErrorBody; documented once for all routes.
_ERROR_RESPONSES: dict[int | str, dict] = {
    code: {"model": ErrorBody, "description": text}
    for code, text in (
        (400, "Invalid request"),
        (404, "Not found"),
        (409, "Conflict"),
        (500, "Storage failure"),
    )
}


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application bound to ``settings.database_url``."""

    settings = settings or load_settings()
    configure_logging(settings.log_level)
    # Fail fast on a missing/invalid DATABASE_URL instead of on first request.
    get_engine(database_url=settings.database_url)
    database_url = settings.database_url

    app = FastAPI(
        title="Kasir API",
        version="1.0.0",
        description="Catalog CRUD, checkout and sales reporting.",
        responses=_ERROR_RESPONSES,
    )

    @app.exception_handler(KasirError)
    async def _kasir_error(_request: Request, exc: KasirError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("request failed: %s", exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(SQLAlchemyError)
    async def _storage_error(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
        # Reached when the commit in session_scope fails.
        logger.error("storage failure: %s", exc)
        return JSONResponse(status_code=500, content={"error": f"storage failure: {exc}"})

    @app.get("/", include_in_schema=False)
    def root() -> RedirectResponse:
        return RedirectResponse(url="/docs", status_code=status.HTTP_301_MOVED_PERMANENTLY)

    @app.get("/health", tags=["meta"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    # ---- Categories ----------------------------------------------------------

    @app.get("/api/categories", tags=["categories"])
    def list_categories() -> list[CategoryOut]:
        with session_scope(database_url=database_url) as session:
            return [CategoryOut.model_validate(c) for c in catalog.list_categories(session)]

    @app.post("/api/categories", status_code=status.HTTP_201_CREATED, tags=["categories"])
    def create_category(body: CategoryIn) -> CategoryOut:
        with session_scope(database_url=database_url) as session:
            category = catalog.create_category(
                session, name=body.name, description=body.description
            )
            return CategoryOut.model_validate(category)

    @app.get("/api/categories/{category_id}", tags=["categories"])
    def get_category(category_id: int) -> CategoryOut:
        with session_scope(database_url=database_url) as session:
            return CategoryOut.model_validate(catalog.get_category(session, category_id))

    @app.put("/api/categories/{category_id}", tags=["categories"])
    def update_category(category_id: int, body: CategoryIn) -> CategoryOut:
        with session_scope(database_url=database_url) as session:
            category = catalog.update_category(
                session, category_id, name=body.name, description=body.description
            )
            return CategoryOut.model_validate(category)

    @app.delete(
        "/api/categories/{category_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        tags=["categories"],
    )
    def delete_category(category_id: int) -> Response:
        with session_scope(database_url=database_url) as session:
            catalog.delete_category(session, category_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # ---- Products ------------------------------------------------------------

    @app.get("/api/products", tags=["products"])
    def list_products(
        name: str | None = None,
        ids: Annotated[list[int] | None, Query()] = None,
    ) -> list[ProductOut]:
        with session_scope(database_url=database_url) as session:
            products = catalog.list_products(session, ids=ids, name=name)
            return [ProductOut.model_validate(p) for p in products]

    @app.post("/api/products", status_code=status.HTTP_201_CREATED, tags=["products"])
    def create_product(body: ProductIn) -> ProductOut:
        with session_scope(database_url=database_url) as session:
            product = catalog.create_product(
                session,
                name=body.name,
                price=body.price,
                stock=body.stock,
                category_ids=body.categories,
            )
            return ProductOut.model_validate(product)

    @app.get("/api/products/{product_id}", tags=["products"])
    def get_product(product_id: int) -> ProductOut:
        with session_scope(database_url=database_url) as session:
            return ProductOut.model_validate(catalog.get_product(session, product_id))

    @app.put("/api/products/{product_id}", tags=["products"])
    def update_product(product_id: int, body: ProductIn) -> ProductOut:
        with session_scope(database_url=database_url) as session:
            product = catalog.update_product(
                session,
                product_id,
                name=body.name,
                price=body.price,
                stock=body.stock,
                category_ids=body.categories,
            )
            return ProductOut.model_validate(product)

    @app.delete(
        "/api/products/{product_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        tags=["products"],
    )
    def delete_product(product_id: int) -> Response:
        with session_scope(database_url=database_url) as session:
            catalog.delete_product(session, product_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # ---- Checkout / transactions ---------------------------------------------

    @app.post("/api/checkout", tags=["transaction"])
    def post_checkout(body: CheckoutRequest) -> TransactionOut:
        with session_scope(database_url=database_url) as session:
            transaction = checkout_engine.checkout(session, body.items)
            return TransactionOut.model_validate(transaction)

    @app.get("/api/transactions", tags=["transaction"])
    def list_transactions(
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[TransactionOut]:
        window = reporting.resolve_window(start_date, end_date)
        with session_scope(database_url=database_url) as session:
            rows = checkout_engine.list_transactions(session, start=window.start, end=window.end)
            return [TransactionOut.model_validate(t) for t in rows]

    @app.get("/api/transactions/{transaction_id}", tags=["transaction"])
    def get_transaction(transaction_id: int) -> TransactionOut:
        with session_scope(database_url=database_url) as session:
            return TransactionOut.model_validate(
                checkout_engine.get_transaction(session, transaction_id)
            )

    # ---- Reports -------------------------------------------------------------

    @app.get("/api/report", tags=["report"])
    def get_report(start_date: str | None = None, end_date: str | None = None) -> Report:
        with session_scope(database_url=database_url) as session:
            return reporting.get_report(session, start_date, end_date)

    @app.get("/api/report/hari-ini", tags=["report"])
    def get_report_today() -> Report:
        with session_scope(database_url=database_url) as session:
            return reporting.get_report(session)

    return app


__all__ = ["create_app"]
