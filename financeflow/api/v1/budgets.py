"""Budget endpoints - list with progress and update by category"""

from fastapi import APIRouter, Depends
from financeflow.api.v1.schemas import BudgetListResponse, BudgetProgressSchema, BudgetSchema, BudgetUpdate
from financeflow.api.dependencies import get_store, store_failure
from financeflow.domain.models import Budget
from financeflow.domain.summary import budget_progress
from financeflow.store.finance_store import FinanceStore

router = APIRouter()


def cached_budgets(store: FinanceStore) -> BudgetListResponse:
    return BudgetListResponse(
        budgets=[BudgetSchema.model_validate(b) for b in store.budgets],
        progress=[BudgetProgressSchema.model_validate(p) for p in budget_progress(store.budgets)],
    )


@router.get("/budgets", response_model=BudgetListResponse)
async def list_budgets(store: FinanceStore = Depends(get_store)):
    if not await store.fetch_budgets():
        raise store_failure(store)
    return cached_budgets(store)


@router.put("/budgets/{category}", response_model=BudgetListResponse)
async def update_budget(category: str, request_body: BudgetUpdate, store: FinanceStore = Depends(get_store)):
    """
    Overwrite the budget for a category.

    The cached budget with the same category is replaced; the cache is not
    re-fetched afterwards.
    """
    budget = Budget(
        id=request_body.id,
        category=category,
        limit=request_body.limit,
        spent=request_body.spent,
        month=request_body.month.replace(day=1),
    )
    if not await store.update_budget(budget):
        raise store_failure(store)
    return cached_budgets(store)
