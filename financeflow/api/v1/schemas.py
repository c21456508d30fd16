"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional
from financeflow.domain.models import ErrorKind


class SignInRequest(BaseModel):
    """Request body for POST /v1/auth/sign-in"""

    email: str = Field(..., min_length=3, description="Account email")
    password: str = Field(..., min_length=1, description="Account password")


class IdentitySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None


class SessionResponse(BaseModel):
    """Response for GET /v1/auth/session"""

    authenticated: bool
    user: Optional[IdentitySchema] = None


class TransactionCreate(BaseModel):
    """Request body for POST /v1/transactions"""

    description: str = Field(..., min_length=1)
    amount: Decimal = Field(..., max_digits=15, decimal_places=2)
    category: str = Field(..., min_length=1)
    type: Literal["income", "expense"]
    date: datetime


class TransactionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    description: str
    amount: Decimal
    category: str
    type: str
    date: datetime
    user_id: Optional[str] = None


class TransactionListResponse(BaseModel):
    """Cached transactions after an operation"""

    transactions: List[TransactionSchema]


class BudgetUpdate(BaseModel):
    """Request body for PUT /v1/budgets/{category}"""

    id: str = Field(..., min_length=1)
    limit: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
    spent: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
    month: date


class BudgetSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    category: str
    limit: Decimal
    spent: Decimal
    month: date
    user_id: Optional[str] = None


class BudgetProgressSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: str
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    percent_used: Decimal
    over_budget: bool


class BudgetListResponse(BaseModel):
    """Cached budgets with usage"""

    budgets: List[BudgetSchema]
    progress: List[BudgetProgressSchema]


class ErrorSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    kind: ErrorKind
    message: str
    code: Optional[str] = None


class StatCard(BaseModel):
    """One headline figure on the dashboard"""

    amount: Decimal
    formatted: str
    trend: Optional[str] = None
    is_positive: bool


class DashboardResponse(BaseModel):
    """Response for GET /v1/dashboard"""

    net_balance: StatCard
    total_income: StatCard
    total_expenses: StatCard
    monthly_goal: StatCard
    monthly_budget: Decimal
    expense_breakdown: Dict[str, Decimal]
    budget_progress: List[BudgetProgressSchema]
    transaction_count: int
    is_loading: bool
    error: Optional[ErrorSchema] = None


class NotificationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    level: str
    message: str
    created_at: datetime


class NotificationListResponse(BaseModel):
    """Response for GET /v1/notifications"""

    notifications: List[NotificationSchema]
