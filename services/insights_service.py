"""Deterministic insight generation from transaction aggregates."""
import logging
from datetime import date, datetime
from typing import Dict, List, Sequence

from models.insight import Insight
from models.transaction import Transaction
from utils.formatting import format_currency

logger = logging.getLogger(__name__)


def in_month(tx: Transaction, now: date) -> bool:
    return tx.date.year == now.year and tx.date.month == now.month


def summarize_insights(transactions: Sequence[Transaction], now: date | datetime) -> List[Insight]:
    """
    Computes up to three insights for `now`'s calendar month, in this order:

    1. Monthly spending overview (always present, even when the total is zero).
    2. Highest spending category, when any category has non-zero spend. Ties go
       to the category seen first in `transactions`.
    3. Positive cash flow, when income is above zero and above the expense total.
    """
    insights: List[Insight] = []

    month_expenses = [tx for tx in transactions if tx.type == 'expense' and in_month(tx, now)]
    total_spend = sum(tx.amount for tx in month_expenses)
    insights.append(Insight(
        title="Monthly Spending Overview",
        description=f"You have spent {format_currency(total_spend)} so far this month based on your tracked transactions.",
        type="info",
    ))

    by_category: Dict[str, float] = {}
    for tx in month_expenses:
        by_category[tx.category.value] = by_category.get(tx.category.value, 0.0) + tx.amount
    if any(total != 0 for total in by_category.values()):
        # max() keeps the first of equal keys, and dicts keep insertion order
        top_category, top_total = max(by_category.items(), key=lambda item: item[1])
        insights.append(Insight(
            title=f"Highest Spending: {top_category}",
            description=f"Your highest spending category this month is {top_category} with a total of {format_currency(top_total)}.",
            type="alert",
        ))

    month_income = sum(tx.amount for tx in transactions if tx.type == 'income' and in_month(tx, now))
    if month_income > 0 and month_income > total_spend:
        insights.append(Insight(
            title="Positive Cash Flow",
            description=f"Great job! You've saved {format_currency(month_income - total_spend)} this month so far.",
            type="success",
        ))

    logger.debug(f"Computed {len(insights)} local insights from {len(month_expenses)} expenses this month.")
    return insights


class LocalSummarizer:
    """Summarizer backed only by summarize_insights."""

    async def summarize(self, transactions: Sequence[Transaction], now: date | datetime) -> List[Insight]:
        return summarize_insights(transactions, now)
