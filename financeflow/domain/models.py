"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)


@dataclass
class Identity:
    """Authenticated user as reported by the auth provider"""

    id: str
    email: Optional[str] = None


@dataclass
class AuthSession:
    """Tokens handed out by the auth provider after sign-in"""

    access_token: str
    refresh_token: str
    expires_at: Optional[int]
    user: Identity


@dataclass
class NewTransaction:
    """Transaction as entered by the user, before the data service assigns an id"""

    description: str
    amount: Decimal
    category: str
    type: str  # "income" or "expense"
    date: datetime


@dataclass
class Transaction:
    """Income or expense entry owned by a user"""

    id: str
    description: str
    amount: Decimal  # magnitude; direction comes from type
    category: str
    type: str  # "income" or "expense"
    date: datetime
    user_id: Optional[str] = None


@dataclass
class Budget:
    """Spending limit for one category in a month"""

    id: str
    category: str
    limit: Decimal
    spent: Decimal
    month: date
    user_id: Optional[str] = None


@dataclass
class Category:
    """User-defined label for transactions"""

    id: str
    name: str
    icon: str
    color: str
    user_id: Optional[str] = None


@dataclass
class FinancialSummary:
    """Totals derived from the cached transactions"""

    total_income: Decimal
    total_expenses: Decimal
    net_savings: Decimal
    monthly_budget: Decimal

    @property
    def net_balance(self) -> Decimal:
        return self.net_savings


@dataclass
class BudgetProgress:
    """How much of a budget has been used"""

    category: str
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    percent_used: Decimal
    over_budget: bool


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    SERVICE = "service"
    UNKNOWN = "unknown"


@dataclass
class OperationError:
    """Failure recorded by the finance store for the latest operation"""

    kind: ErrorKind
    message: str
    code: Optional[str] = None

    @classmethod
    def unauthenticated(cls, message: str) -> "OperationError":
        return cls(kind=ErrorKind.UNAUTHENTICATED, message=message)

    @classmethod
    def service(cls, code: str, message: str) -> "OperationError":
        return cls(kind=ErrorKind.SERVICE, message=message, code=code)

    @classmethod
    def unknown(cls, message: str) -> "OperationError":
        return cls(kind=ErrorKind.UNKNOWN, message=message)
