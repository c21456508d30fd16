"""Unit tests for the finance store"""

import asyncio
import pytest
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from financeflow.domain.exceptions import DataServiceError, InvalidRowError
from financeflow.domain.models import ErrorKind, NewTransaction, Transaction
from financeflow.store.finance_store import FinanceStore, classify_error


@pytest.fixture
def new_transaction() -> NewTransaction:
    return NewTransaction(
        description="Coffee",
        amount=Decimal("180"),
        category="food",
        type="expense",
        date=datetime(2024, 3, 1, tzinfo=timezone.utc),
    )


def stored(new_transaction: NewTransaction, transaction_id: str = "t-new") -> Transaction:
    return Transaction(
        id=transaction_id,
        description=new_transaction.description,
        amount=new_transaction.amount,
        category=new_transaction.category,
        type=new_transaction.type,
        date=new_transaction.date,
        user_id="user-1",
    )


async def test_add_transaction_appends_returned_row(store, transaction_repo, sample_transactions, new_transaction, notifications):
    """New rows land at the end regardless of date"""
    store.transactions = list(sample_transactions)
    transaction_repo.create.return_value = stored(new_transaction)

    added = await store.add_transaction(new_transaction)

    assert added is True
    assert store.transactions[:-1] == sample_transactions
    assert store.transactions[-1].id == "t-new"
    assert store.error is None
    assert store.is_loading is False
    transaction_repo.create.assert_awaited_once_with(new_transaction, "user-1", "access-token")
    assert [n.message for n in notifications.pending()] == ["Transaction added successfully"]


async def test_add_transaction_without_user_never_inserts(
    signed_out_auth_client, transaction_repo, budget_repo, notifications, new_transaction
):
    store = FinanceStore(signed_out_auth_client, transaction_repo, budget_repo, notifications)

    added = await store.add_transaction(new_transaction)

    assert added is False
    transaction_repo.create.assert_not_called()
    assert store.error.kind == ErrorKind.UNAUTHENTICATED
    assert store.error_message == "User not authenticated"
    assert store.is_loading is False
    assert notifications.pending()[0].level == "error"


async def test_add_transaction_with_rejected_token_is_unauthenticated(store, auth_client, transaction_repo, new_transaction):
    """A session whose user the provider no longer recognises counts as signed out"""
    auth_client.get_user.return_value = None

    assert await store.add_transaction(new_transaction) is False
    transaction_repo.create.assert_not_called()
    assert store.error.kind == ErrorKind.UNAUTHENTICATED


async def test_add_transaction_service_failure_keeps_cache(store, transaction_repo, sample_transactions, new_transaction):
    store.transactions = list(sample_transactions)
    transaction_repo.create.side_effect = DataServiceError("42501", "new row violates row-level security policy")

    added = await store.add_transaction(new_transaction)

    assert added is False
    assert store.transactions == sample_transactions
    assert store.error.kind == ErrorKind.SERVICE
    assert store.error.code == "42501"
    assert store.error.message == "new row violates row-level security policy"
    assert store.is_loading is False


async def test_add_transaction_unknown_failure_without_message_uses_fallback(store, transaction_repo, new_transaction):
    transaction_repo.create.side_effect = RuntimeError()

    assert await store.add_transaction(new_transaction) is False
    assert store.error.kind == ErrorKind.UNKNOWN
    assert store.error.message == "Failed to add transaction"


async def test_fetch_transactions_replaces_cache(store, transaction_repo, sample_transactions):
    """Cache after fetch is exactly the returned rows in service order"""
    store.transactions = [replace(sample_transactions[0], id="stale")]
    fetched = list(reversed(sample_transactions))
    transaction_repo.list_for_user.return_value = fetched

    assert await store.fetch_transactions() is True

    assert store.transactions == fetched
    assert all(t.id != "stale" for t in store.transactions)
    transaction_repo.list_for_user.assert_awaited_once_with("user-1", "access-token")


async def test_fetch_transactions_emits_no_success_notification(store, transaction_repo, notifications):
    transaction_repo.list_for_user.return_value = []

    await store.fetch_transactions()

    assert notifications.pending() == []


async def test_fetch_transactions_signed_out_asks_to_sign_in(
    signed_out_auth_client, transaction_repo, budget_repo, notifications, sample_transactions
):
    store = FinanceStore(signed_out_auth_client, transaction_repo, budget_repo, notifications)
    store.transactions = list(sample_transactions)

    assert await store.fetch_transactions() is False

    assert store.error_message == "Please sign in to view transactions"
    assert store.transactions == sample_transactions
    transaction_repo.list_for_user.assert_not_called()


async def test_fetch_budgets_signed_out_never_lists(
    signed_out_auth_client, transaction_repo, budget_repo, notifications, sample_budgets
):
    store = FinanceStore(signed_out_auth_client, transaction_repo, budget_repo, notifications)
    store.budgets = list(sample_budgets)

    assert await store.fetch_budgets() is False

    budget_repo.list_for_user.assert_not_called()
    assert store.error.kind == ErrorKind.UNAUTHENTICATED
    assert store.error_message == "User not authenticated"
    assert store.budgets == sample_budgets


async def test_update_budget_signed_out_never_updates(
    signed_out_auth_client, transaction_repo, budget_repo, notifications, sample_budgets
):
    store = FinanceStore(signed_out_auth_client, transaction_repo, budget_repo, notifications)
    store.budgets = list(sample_budgets)

    assert await store.update_budget(replace(sample_budgets[0], limit=Decimal("1"))) is False

    budget_repo.update_by_category.assert_not_called()
    assert store.error.kind == ErrorKind.UNAUTHENTICATED
    assert store.budgets == sample_budgets
    assert store.is_loading is False


async def test_delete_transaction_signed_out_never_deletes(
    signed_out_auth_client, transaction_repo, budget_repo, notifications, sample_transactions
):
    store = FinanceStore(signed_out_auth_client, transaction_repo, budget_repo, notifications)
    store.transactions = list(sample_transactions)

    assert await store.delete_transaction(sample_transactions[0].id) is False

    transaction_repo.delete.assert_not_called()
    assert store.error.kind == ErrorKind.UNAUTHENTICATED
    assert store.transactions == sample_transactions
    assert notifications.pending()[0].level == "error"
async def test_fetch_transactions_invalid_row_is_service_error(store, transaction_repo):
    transaction_repo.list_for_user.side_effect = InvalidRowError("Invalid transaction type: transfer")

    assert await store.fetch_transactions() is False
    assert store.error.kind == ErrorKind.SERVICE
    assert store.error.code == "invalid_response"


async def test_delete_transaction_removes_only_matching(store, transaction_repo, sample_transactions):
    store.transactions = list(sample_transactions)
    target = sample_transactions[2]

    assert await store.delete_transaction(target.id) is True

    assert store.transactions == [t for t in sample_transactions if t.id != target.id]
    assert len(store.transactions) == len(sample_transactions) - 1
    transaction_repo.delete.assert_awaited_once_with(target.id, "access-token")


async def test_delete_transaction_failure_leaves_cache(store, transaction_repo, sample_transactions, notifications):
    store.transactions = list(sample_transactions)
    transaction_repo.delete.side_effect = DataServiceError("timeout", "Data service timeout after 5.0s")

    assert await store.delete_transaction(sample_transactions[0].id) is False

    assert store.transactions == sample_transactions
    assert store.error.message == "Data service timeout after 5.0s"
    assert notifications.pending()[-1].message == "Data service timeout after 5.0s"


async def test_update_budget_replaces_only_matching_category(store, budget_repo, sample_budgets):
    store.budgets = list(sample_budgets)
    updated = replace(sample_budgets[0], limit=Decimal("15000"))

    assert await store.update_budget(updated) is True

    assert store.budgets[0] is updated
    assert store.budgets[1] is sample_budgets[1]
    assert store.budgets[2] is sample_budgets[2]
    budget_repo.update_by_category.assert_awaited_once_with(updated, "user-1", "access-token")


async def test_update_budget_failure_leaves_budgets(store, budget_repo, sample_budgets):
    store.budgets = list(sample_budgets)
    budget_repo.update_by_category.side_effect = DataServiceError("500", "")

    assert await store.update_budget(replace(sample_budgets[0], limit=Decimal("1"))) is False

    assert store.budgets == sample_budgets
    assert store.error.message == "Failed to update budget"


async def test_fetch_budgets_replaces_cache(store, budget_repo, sample_budgets):
    budget_repo.list_for_user.return_value = sample_budgets

    assert await store.fetch_budgets() is True
    assert store.budgets == sample_budgets


async def test_success_clears_previous_error(store, transaction_repo):
    transaction_repo.list_for_user.side_effect = [DataServiceError("network", "Data service unreachable"), []]

    await store.fetch_transactions()
    assert store.error is not None

    await store.fetch_transactions()
    assert store.error is None


async def test_summary_recomputes_from_cache(store, sample_transactions):
    store.transactions = list(sample_transactions)
    assert store.summary.total_income == Decimal("150000")

    store.transactions = []
    assert store.summary.total_income == Decimal("0")


async def test_loading_stays_set_while_any_operation_is_in_flight(store, transaction_repo, new_transaction):
    release_fetch = asyncio.Event()

    async def slow_fetch(user_id, access_token):
        await release_fetch.wait()
        return []

    transaction_repo.list_for_user.side_effect = slow_fetch
    transaction_repo.create.return_value = stored(new_transaction)

    fetch_task = asyncio.create_task(store.fetch_transactions())
    await asyncio.sleep(0)
    assert store.is_loading is True

    await store.add_transaction(new_transaction)
    assert store.is_loading is True

    release_fetch.set()
    await fetch_task
    assert store.is_loading is False


async def test_reset_clears_cache_and_error(store, sample_transactions, sample_budgets):
    store.transactions = list(sample_transactions)
    store.budgets = list(sample_budgets)
    store.error = classify_error(RuntimeError("boom"), "fallback")

    store.reset()

    assert store.transactions == []
    assert store.budgets == []
    assert store.error is None


async def test_fetch_finishing_after_reset_is_discarded(store, transaction_repo, sample_transactions):
    """Rows fetched for the previous user never repopulate a reset store"""
    release_fetch = asyncio.Event()

    async def slow_fetch(user_id, access_token):
        await release_fetch.wait()
        return list(sample_transactions)

    transaction_repo.list_for_user.side_effect = slow_fetch

    fetch_task = asyncio.create_task(store.fetch_transactions())
    await asyncio.sleep(0)
    store.reset()
    release_fetch.set()
    await fetch_task

    assert store.transactions == []
    assert store.is_loading is False


async def test_failure_finishing_after_reset_leaves_no_error(store, budget_repo, notifications):
    release_fetch = asyncio.Event()

    async def failing_fetch(user_id, access_token):
        await release_fetch.wait()
        raise DataServiceError("XX000", "database is down")

    budget_repo.list_for_user.side_effect = failing_fetch

    fetch_task = asyncio.create_task(store.fetch_budgets())
    await asyncio.sleep(0)
    store.reset()
    release_fetch.set()

    assert await fetch_task is False
    assert store.error is None
    assert notifications.pending() == []


def test_classify_error_kinds():
    assert classify_error(DataServiceError("PGRST116", "No rows"), "x").kind == ErrorKind.SERVICE
    assert classify_error(InvalidRowError("bad"), "x").code == "invalid_response"
    assert classify_error(ValueError("bad"), "x").kind == ErrorKind.UNKNOWN
    assert classify_error(ValueError(), "fallback").message == "fallback"
