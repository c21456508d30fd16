"""Amount formatting for dashboard figures"""

from decimal import Decimal, ROUND_HALF_UP, localcontext

from financeflow.config import settings
from financeflow.domain.models import FinancialSummary
from financeflow.domain.summary import savings_rate


def group_indian_digits(digits: str) -> str:
    """
    Insert separators the Indian way: last three digits, then pairs.

    Example:
        "10000000" → "1,00,00,000"
    """
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_currency(amount: Decimal, symbol: str | None = None) -> str:
    """Whole-unit amount with currency symbol, e.g. ₹1,00,000 or -₹300"""
    symbol = settings.currency_symbol if symbol is None else symbol
    amount = Decimal(amount)
    # Quantizing needs one digit of precision per integer digit
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 2)
        rounded = amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        digits = f"{abs(rounded):f}"
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{group_indian_digits(digits)}"


def format_trend(summary: FinancialSummary) -> str:
    """Savings rate with explicit sign for non-negative balances, e.g. +70.0%"""
    rate = savings_rate(summary)
    prefix = "+" if summary.net_savings >= 0 else ""
    return f"{prefix}{rate:.1f}%"
