"""GET /v1/dashboard and GET /v1/notifications - figures derived from the store's cache"""

from decimal import Decimal
from fastapi import APIRouter, Depends, Query
from financeflow.api.v1.schemas import (
    BudgetProgressSchema,
    DashboardResponse,
    ErrorSchema,
    NotificationListResponse,
    NotificationSchema,
    StatCard,
)
from financeflow.api.dependencies import get_notifications, get_store
from financeflow.config import settings
from financeflow.domain.summary import budget_progress, expense_breakdown
from financeflow.store.finance_store import FinanceStore
from financeflow.store.notifications import NotificationCenter
from financeflow.utils.currency import format_currency, format_trend

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    refresh: bool = Query(False, description="Re-fetch transactions before aggregating"),
    store: FinanceStore = Depends(get_store),
):
    """
    Headline totals, expense breakdown and budget progress.

    A failed refresh does not fail the request; the error is reported in
    the `error` field and the figures come from the existing cache.
    """
    if refresh:
        await store.fetch_transactions()

    summary = store.summary
    goal = Decimal(settings.monthly_goal)
    goal_progress = summary.net_savings / goal * 100 if goal > 0 else Decimal("0")

    return DashboardResponse(
        net_balance=StatCard(
            amount=summary.net_balance,
            formatted=format_currency(summary.net_balance),
            trend=format_trend(summary),
            is_positive=summary.net_balance >= 0,
        ),
        total_income=StatCard(
            amount=summary.total_income,
            formatted=format_currency(summary.total_income),
            is_positive=True,
        ),
        total_expenses=StatCard(
            amount=summary.total_expenses,
            formatted=format_currency(summary.total_expenses),
            is_positive=False,
        ),
        monthly_goal=StatCard(
            amount=goal,
            formatted=format_currency(goal),
            trend=f"{goal_progress:.0f}%",
            is_positive=goal_progress >= 0,
        ),
        monthly_budget=summary.monthly_budget,
        expense_breakdown=expense_breakdown(store.transactions),
        budget_progress=[BudgetProgressSchema.model_validate(p) for p in budget_progress(store.budgets)],
        transaction_count=len(store.transactions),
        is_loading=store.is_loading,
        error=ErrorSchema.model_validate(store.error) if store.error else None,
    )


@router.get("/notifications", response_model=NotificationListResponse)
def drain_notifications(notifications: NotificationCenter = Depends(get_notifications)):
    """Return and clear pending notifications"""
    return NotificationListResponse(
        notifications=[NotificationSchema.model_validate(n) for n in notifications.drain()]
    )
