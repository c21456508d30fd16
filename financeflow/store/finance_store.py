"""Finance store - per-application cache of the signed-in user's data"""

import dataclasses
import logging
import time
from typing import List, Optional

from financeflow.domain.exceptions import DataServiceError, InvalidRowError
from financeflow.domain.models import (
    AuthSession,
    Budget,
    Category,
    FinancialSummary,
    NewTransaction,
    OperationError,
    Transaction,
)
from financeflow.domain.summary import summarize_transactions
from financeflow.infrastructure.clients.auth import AuthClient
from financeflow.infrastructure.database.repositories import BudgetRepository, TransactionRepository
from financeflow.infrastructure.observability.logging import log_operation
from financeflow.infrastructure.observability.metrics import record_operation
from financeflow.store.notifications import NotificationCenter, Notifier

NOT_AUTHENTICATED = "User not authenticated"
SIGN_IN_TO_VIEW = "Please sign in to view transactions"


def classify_error(error: Exception, fallback: str) -> OperationError:
    """Turn any failure into a typed OperationError, using fallback when it has no message"""
    if isinstance(error, DataServiceError):
        return OperationError.service(error.code, error.message or fallback)
    if isinstance(error, InvalidRowError):
        return OperationError.service("invalid_response", str(error) or fallback)
    return OperationError.unknown(str(error) or fallback)


class FinanceStore:
    """
    Write-through mirror of the user's transactions and budgets.

    Every operation marks the store as loading, resolves the caller once,
    talks to the data service, then patches the cache on success or records
    a typed error on failure. Operations never raise; they report success as
    a bool and leave the details in `error`.

    Overlapping operations are not serialized: each applies its own patch
    when it completes and the last one to finish owns `error`. Operations
    still in flight when reset() runs leave the cache and `error` untouched.
    """

    def __init__(
        self,
        auth_client: AuthClient,
        transaction_repo: TransactionRepository,
        budget_repo: BudgetRepository,
        notifier: Notifier | None = None,
    ):
        self.auth = auth_client
        self.transaction_repo = transaction_repo
        self.budget_repo = budget_repo
        self.notifier = notifier or NotificationCenter()

        self.transactions: List[Transaction] = []
        self.budgets: List[Budget] = []
        self.categories: List[Category] = []
        self.error: Optional[OperationError] = None
        self._in_flight = 0
        # Bumped by reset(); results from older operations are dropped
        self._generation = 0

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None

    @property
    def summary(self) -> FinancialSummary:
        """Recomputed from the cache on every read"""
        return summarize_transactions(self.transactions, self.budgets)

    def reset(self) -> None:
        """Forget cached data, e.g. after the user signs out"""
        self.transactions = []
        self.budgets = []
        self.categories = []
        self.error = None
        self._generation += 1

    async def add_transaction(self, new_transaction: NewTransaction) -> bool:
        """Insert a transaction and append the stored row to the cache"""
        operation = "add_transaction"
        start_time = time.time()
        user_id = None
        generation = self._begin()
        try:
            session = await self._resolve_identity()
            if session is None:
                return self._fail(operation, OperationError.unauthenticated(NOT_AUTHENTICATED), start_time, user_id, generation)
            user_id = session.user.id

            created = await self.transaction_repo.create(new_transaction, user_id, session.access_token)

            # Appended as-is; the cache is not re-sorted by date
            if self._is_current(operation, generation):
                self.transactions = [*self.transactions, created]
            return self._succeed(operation, "Transaction added successfully", start_time, user_id)
        except Exception as e:
            return self._fail(operation, classify_error(e, "Failed to add transaction"), start_time, user_id, generation)
        finally:
            self._end()

    async def fetch_transactions(self) -> bool:
        """Replace the cached transactions with the user's rows, newest first"""
        operation = "fetch_transactions"
        start_time = time.time()
        user_id = None
        generation = self._begin()
        try:
            session = await self._resolve_identity()
            if session is None:
                return self._fail(operation, OperationError.unauthenticated(SIGN_IN_TO_VIEW), start_time, user_id, generation)
            user_id = session.user.id

            transactions = await self.transaction_repo.list_for_user(user_id, session.access_token)
            if self._is_current(operation, generation):
                self.transactions = transactions
            return self._succeed(operation, None, start_time, user_id)
        except Exception as e:
            return self._fail(operation, classify_error(e, "Failed to fetch transactions"), start_time, user_id, generation)
        finally:
            self._end()

    async def fetch_budgets(self) -> bool:
        """Replace the cached budgets with the user's rows"""
        operation = "fetch_budgets"
        start_time = time.time()
        user_id = None
        generation = self._begin()
        try:
            session = await self._resolve_identity()
            if session is None:
                return self._fail(operation, OperationError.unauthenticated(NOT_AUTHENTICATED), start_time, user_id, generation)
            user_id = session.user.id

            budgets = await self.budget_repo.list_for_user(user_id, session.access_token)
            if self._is_current(operation, generation):
                self.budgets = budgets
            return self._succeed(operation, None, start_time, user_id)
        except Exception as e:
            return self._fail(operation, classify_error(e, "Failed to fetch budgets"), start_time, user_id, generation)
        finally:
            self._end()

    async def update_budget(self, budget: Budget) -> bool:
        """Update the budget for budget.category and swap it into the cache"""
        operation = "update_budget"
        start_time = time.time()
        user_id = None
        generation = self._begin()
        try:
            session = await self._resolve_identity()
            if session is None:
                return self._fail(operation, OperationError.unauthenticated(NOT_AUTHENTICATED), start_time, user_id, generation)
            user_id = session.user.id

            await self.budget_repo.update_by_category(budget, user_id, session.access_token)

            if self._is_current(operation, generation):
                self.budgets = [budget if cached.category == budget.category else cached for cached in self.budgets]
            return self._succeed(operation, "Budget updated successfully", start_time, user_id)
        except Exception as e:
            return self._fail(operation, classify_error(e, "Failed to update budget"), start_time, user_id, generation)
        finally:
            self._end()

    async def delete_transaction(self, transaction_id: str) -> bool:
        """Delete a transaction by id and drop it from the cache"""
        operation = "delete_transaction"
        start_time = time.time()
        user_id = None
        generation = self._begin()
        try:
            session = await self._resolve_identity()
            if session is None:
                return self._fail(operation, OperationError.unauthenticated(NOT_AUTHENTICATED), start_time, user_id, generation)
            user_id = session.user.id

            await self.transaction_repo.delete(transaction_id, session.access_token)

            if self._is_current(operation, generation):
                self.transactions = [t for t in self.transactions if t.id != transaction_id]
            return self._succeed(operation, "Transaction deleted successfully", start_time, user_id)
        except Exception as e:
            return self._fail(operation, classify_error(e, "Failed to delete transaction"), start_time, user_id, generation)
        finally:
            self._end()

    async def _resolve_identity(self) -> Optional[AuthSession]:
        """Current session with the user confirmed by the auth provider, or None"""
        session = await self.auth.get_session()
        if session is None:
            return None
        user = await self.auth.get_user()
        if user is None:
            return None
        return dataclasses.replace(session, user=user)

    def _begin(self) -> int:
        self._in_flight += 1
        self.error = None
        return self._generation

    def _is_current(self, operation: str, generation: int) -> bool:
        """False once reset() has run since the operation began"""
        if generation == self._generation:
            return True
        logging.info(f"{operation} result discarded after store reset", extra={"operation": operation})
        return False

    def _end(self) -> None:
        self._in_flight = max(self._in_flight - 1, 0)

    def _succeed(self, operation: str, message: Optional[str], start_time: float, user_id: Optional[str]) -> bool:
        self.error = None
        if message:
            self.notifier.success(message)
        record_operation(operation, succeeded=True)
        log_operation(operation, user_id, "success", (time.time() - start_time) * 1000)
        return True

    def _fail(
        self, operation: str, error: OperationError, start_time: float, user_id: Optional[str], generation: int
    ) -> bool:
        if self._is_current(operation, generation):
            self.error = error
            self.notifier.error(error.message)
        record_operation(operation, succeeded=False)
        logging.error(
            f"{operation} failed: {error.message}",
            extra={"operation": operation, "error_kind": error.kind.value, "error_code": error.code},
        )
        log_operation(operation, user_id, "failure", (time.time() - start_time) * 1000, error.kind.value)
        return False
