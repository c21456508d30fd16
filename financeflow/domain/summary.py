"""Aggregation over cached transactions - totals, breakdowns and budget progress"""

from decimal import Decimal
from typing import Dict, Iterable, List

from financeflow.domain.models import Budget, BudgetProgress, FinancialSummary, Transaction, INCOME

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def summarize_transactions(
    transactions: Iterable[Transaction],
    budgets: Iterable[Budget] = (),
) -> FinancialSummary:
    """
    Reduce a transaction list into income, expense and net totals.

    Income adds its amount as recorded. Anything else counts as an expense
    and contributes its absolute value, so a negative expense amount and a
    positive one are treated the same.

    Example:
        [income 1000, expense -300] → income 1000, expenses 300, net 700
    """
    total_income = ZERO
    total_expenses = ZERO
    for transaction in transactions:
        if transaction.type == INCOME:
            total_income += transaction.amount
        else:
            total_expenses += abs(transaction.amount)

    monthly_budget = sum((budget.limit for budget in budgets), ZERO)

    return FinancialSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_savings=total_income - total_expenses,
        monthly_budget=monthly_budget,
    )


def savings_rate(summary: FinancialSummary) -> Decimal:
    """Net balance as a percentage of income (zero income divides by 1)"""
    return summary.net_savings / (summary.total_income or 1) * HUNDRED


def expense_breakdown(transactions: Iterable[Transaction]) -> Dict[str, Decimal]:
    """Total expenses per category, largest first"""
    totals: Dict[str, Decimal] = {}
    for transaction in transactions:
        if transaction.type == INCOME:
            continue
        totals[transaction.category] = totals.get(transaction.category, ZERO) + abs(transaction.amount)

    return dict(sorted(totals.items(), key=lambda item: item[1], reverse=True))


def budget_progress(budgets: Iterable[Budget]) -> List[BudgetProgress]:
    """Usage of each budget; a zero limit reports 0% used"""
    progress = []
    for budget in budgets:
        percent_used = budget.spent / budget.limit * HUNDRED if budget.limit > 0 else ZERO
        progress.append(
            BudgetProgress(
                category=budget.category,
                limit=budget.limit,
                spent=budget.spent,
                remaining=budget.limit - budget.spent,
                percent_used=percent_used.quantize(Decimal("0.1")),
                over_budget=budget.spent > budget.limit,
            )
        )
    return progress
