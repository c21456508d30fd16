"""Dependency injection for FastAPI endpoints"""

from fastapi import HTTPException, Request
from financeflow.domain.models import ErrorKind
from financeflow.infrastructure.clients.auth import AuthClient
from financeflow.store.finance_store import FinanceStore
from financeflow.store.notifications import NotificationCenter

ERROR_STATUS = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.SERVICE: 502,
    ErrorKind.UNKNOWN: 500,
}


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_store(request: Request) -> FinanceStore:
    """Provide the application's finance store"""
    return request.app.state.store


def get_auth_client(request: Request) -> AuthClient:
    """Provide the auth client the store resolves users with"""
    return request.app.state.store.auth


def get_notifications(request: Request) -> NotificationCenter:
    return request.app.state.store.notifier


def store_failure(store: FinanceStore) -> HTTPException:
    """HTTP error for the store's latest recorded failure"""
    if store.error is None:
        return HTTPException(status_code=500, detail="Internal server error")
    return HTTPException(status_code=ERROR_STATUS[store.error.kind], detail=store.error.message)
