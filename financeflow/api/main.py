"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response
from financeflow.api.middleware import RequestIDMiddleware, MetricsMiddleware
from financeflow.api.v1 import auth, budgets, dashboard, transactions
from financeflow.domain.models import AuthSession
from financeflow.infrastructure.clients.auth import AuthClient
from financeflow.infrastructure.clients.rest import RestClient
from financeflow.infrastructure.database.repositories import BudgetRepository, TransactionRepository
from financeflow.infrastructure.observability.logging import setup_logging
from financeflow.store.finance_store import FinanceStore
from financeflow.store.notifications import NotificationCenter
from financeflow.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def build_store(auth_client: AuthClient | None = None, rest_client: RestClient | None = None) -> FinanceStore:
    """Wire a finance store against the configured data service"""
    auth_client = auth_client or AuthClient()
    rest_client = rest_client or RestClient()
    return FinanceStore(
        auth_client,
        TransactionRepository(rest_client),
        BudgetRepository(rest_client),
        NotificationCenter(),
    )


def create_app(store: FinanceStore | None = None) -> FastAPI:
    """Create and configure FastAPI application with its own finance store"""
    store = store or build_store()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Load the signed-in user's data once at start
        if await store.auth.get_session() is not None:
            await store.fetch_transactions()

        def on_auth_state_change(event: str, session: Optional[AuthSession]) -> None:
            logging.info("Clearing cached finance data", extra={"event": event})
            store.reset()

        subscription = store.auth.on_auth_state_change(on_auth_state_change)
        try:
            yield
        finally:
            subscription.unsubscribe()

    app = FastAPI(
        title="FinanceFlow",
        description="Personal finance tracking backed by a hosted data service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.store = store

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(auth.router, prefix="/v1", tags=["auth"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(budgets.router, prefix="/v1", tags=["budgets"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])

    return app


app = create_app()
