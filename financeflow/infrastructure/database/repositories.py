"""Data access layer for finance entities stored in the hosted database"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List
from financeflow.config import settings
from financeflow.domain.exceptions import InvalidRowError
from financeflow.domain.models import Budget, NewTransaction, Transaction, TRANSACTION_TYPES
from financeflow.infrastructure.clients.rest import RestClient
from financeflow.utils.date_utils import parse_month, parse_timestamp


def to_decimal(value: Any) -> Decimal:
    return Decimal(str(value))


def transaction_from_row(row: Dict[str, Any]) -> Transaction:
    """Map a transactions row to the domain model"""
    try:
        transaction = Transaction(
            id=str(row["id"]),
            description=row["description"],
            amount=to_decimal(row["amount"]),
            category=row["category"],
            type=row["type"],
            date=parse_timestamp(row["date"]),
            user_id=row.get("user_id"),
        )
    except (KeyError, TypeError, ValueError, InvalidOperation) as e:
        raise InvalidRowError(f"Invalid transaction row: {e}") from e

    if transaction.type not in TRANSACTION_TYPES:
        raise InvalidRowError(f"Invalid transaction type: {transaction.type}")
    return transaction


def budget_from_row(row: Dict[str, Any]) -> Budget:
    """Map a budgets row to the domain model"""
    try:
        return Budget(
            id=str(row["id"]),
            category=row["category"],
            limit=to_decimal(row["limit"]),
            spent=to_decimal(row["spent"]),
            month=parse_month(row["month"]),
            user_id=row.get("user_id"),
        )
    except (KeyError, TypeError, ValueError, InvalidOperation) as e:
        raise InvalidRowError(f"Invalid budget row: {e}") from e


class TransactionRepository:
    """Repository for user transactions"""

    def __init__(self, client: RestClient, table: str | None = None):
        self.client = client
        self.table = table or settings.transactions_table

    async def create(self, new_transaction: NewTransaction, user_id: str, access_token: str) -> Transaction:
        """Insert a transaction owned by user_id and return the stored row"""
        row = await self.client.insert(
            self.table,
            {
                "description": new_transaction.description,
                "amount": float(new_transaction.amount),
                "category": new_transaction.category,
                "type": new_transaction.type,
                "date": new_transaction.date.isoformat(),
                "user_id": user_id,
            },
            access_token,
        )
        return transaction_from_row(row)

    async def list_for_user(self, user_id: str, access_token: str) -> List[Transaction]:
        """All of a user's transactions, newest first"""
        rows = await self.client.select(
            self.table,
            access_token,
            filters={"user_id": user_id},
            order="date.desc",
        )
        return [transaction_from_row(row) for row in rows]

    async def delete(self, transaction_id: str, access_token: str) -> None:
        await self.client.delete(self.table, access_token, filters={"id": transaction_id})


class BudgetRepository:
    """Repository for monthly category budgets"""

    def __init__(self, client: RestClient, table: str | None = None):
        self.client = client
        self.table = table or settings.budgets_table

    async def list_for_user(self, user_id: str, access_token: str) -> List[Budget]:
        rows = await self.client.select(
            self.table,
            access_token,
            filters={"user_id": user_id},
            order="category.asc",
        )
        return [budget_from_row(row) for row in rows]

    async def update_by_category(self, budget: Budget, user_id: str, access_token: str) -> None:
        """Overwrite the user's budget row for budget.category"""
        await self.client.update(
            self.table,
            {
                "id": budget.id,
                "category": budget.category,
                "limit": float(budget.limit),
                "spent": float(budget.spent),
                "month": budget.month.isoformat(),
                "user_id": user_id,
            },
            access_token,
            filters={"category": budget.category, "user_id": user_id},
        )
