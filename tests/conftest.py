"""Pytest fixtures for testing"""

import pytest
import httpx
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Generator
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from financeflow.api.main import build_store, create_app
from financeflow.domain.models import AuthSession, Budget, Identity, Transaction
from financeflow.infrastructure.clients.auth import AuthClient
from financeflow.infrastructure.clients.rest import RestClient
from financeflow.infrastructure.database.repositories import BudgetRepository, TransactionRepository
from financeflow.store.finance_store import FinanceStore
from financeflow.store.notifications import NotificationCenter
from mock_data_service import API_KEY, BASE_URL, MockDataService


@pytest.fixture
def identity() -> Identity:
    return Identity(id="user-1", email="asha@example.com")


@pytest.fixture
def auth_session(identity: Identity) -> AuthSession:
    return AuthSession(access_token="access-token", refresh_token="refresh-token", expires_at=None, user=identity)


@pytest.fixture
def auth_client(auth_session: AuthSession, identity: Identity) -> MagicMock:
    """Auth client mock with a signed-in user"""
    client = MagicMock(spec=AuthClient)
    client.get_session.return_value = auth_session
    client.get_user.return_value = identity
    return client


@pytest.fixture
def signed_out_auth_client() -> MagicMock:
    client = MagicMock(spec=AuthClient)
    client.get_session.return_value = None
    client.get_user.return_value = None
    return client


@pytest.fixture
def transaction_repo() -> MagicMock:
    return MagicMock(spec=TransactionRepository)


@pytest.fixture
def budget_repo() -> MagicMock:
    return MagicMock(spec=BudgetRepository)


@pytest.fixture
def notifications() -> NotificationCenter:
    return NotificationCenter(max_items=10)


@pytest.fixture
def store(
    auth_client: MagicMock,
    transaction_repo: MagicMock,
    budget_repo: MagicMock,
    notifications: NotificationCenter,
) -> FinanceStore:
    return FinanceStore(auth_client, transaction_repo, budget_repo, notifications)


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    """Salary credits and weekly grocery spending"""
    base_date = datetime(2024, 1, 1, tzinfo=timezone.utc)
    transactions = []

    for month in range(3):
        transactions.append(
            Transaction(
                id=f"income_{month}",
                description="Salary",
                amount=Decimal("50000"),
                category="salary",
                type="income",
                date=base_date + timedelta(days=month * 30),
                user_id="user-1",
            )
        )

    for day in range(0, 84, 7):
        transactions.append(
            Transaction(
                id=f"expense_{day}",
                description="Groceries",
                amount=Decimal("2500"),
                category="groceries",
                type="expense",
                date=base_date + timedelta(days=day),
                user_id="user-1",
            )
        )

    return transactions


@pytest.fixture
def sample_budgets() -> list[Budget]:
    month = date(2024, 1, 1)
    return [
        Budget(id="b1", category="groceries", limit=Decimal("12000"), spent=Decimal("10000"), month=month, user_id="user-1"),
        Budget(id="b2", category="rent", limit=Decimal("20000"), spent=Decimal("20000"), month=month, user_id="user-1"),
        Budget(id="b3", category="travel", limit=Decimal("5000"), spent=Decimal("6500"), month=month, user_id="user-1"),
    ]


@pytest.fixture
def data_service() -> MockDataService:
    return MockDataService()


@pytest.fixture
def transport(data_service: MockDataService) -> httpx.MockTransport:
    return httpx.MockTransport(data_service.handler)


@pytest.fixture
def client(transport: httpx.MockTransport) -> Generator[TestClient, None, None]:
    """FastAPI test client whose store talks to the in-memory data service"""
    store = build_store(
        AuthClient(base_url=BASE_URL, api_key=API_KEY, transport=transport),
        RestClient(base_url=BASE_URL, api_key=API_KEY, transport=transport),
    )
    app = create_app(store)
    with TestClient(app) as test_client:
        yield test_client
