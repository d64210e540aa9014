"""Aggregates shown on the dashboard."""
from datetime import date
from typing import Any, Dict, List

from services.goals_service import goal_progress
from services.store import FinanceSnapshot


def _month_key(d: date) -> str:
    return d.strftime('%Y-%m')


def build_dashboard(snapshot: FinanceSnapshot, today: date) -> Dict[str, Any]:
    """
    Totals, savings rate, monthly averages, expense breakdown, monthly trend,
    budget health for the current month and progress of the first goal.
    """
    transactions = snapshot.transactions
    income = sum(tx.amount for tx in transactions if tx.type == 'income')
    expense = sum(tx.amount for tx in transactions if tx.type == 'expense')
    months = {_month_key(tx.date) for tx in transactions}
    month_count = max(1, len(months))

    by_category: Dict[str, float] = {}
    for tx in transactions:
        if tx.type == 'expense':
            by_category[tx.category.value] = by_category.get(tx.category.value, 0.0) + tx.amount
    category_breakdown = [
        {"name": name, "value": value}
        for name, value in sorted(by_category.items(), key=lambda item: item[1], reverse=True)
    ]

    trend: Dict[str, Dict[str, Any]] = {}
    for tx in sorted(transactions, key=lambda tx: tx.date):
        key = _month_key(tx.date)
        bucket = trend.setdefault(key, {"month": key, "label": tx.date.strftime('%b'), "income": 0.0, "expense": 0.0})
        bucket[tx.type] += tx.amount
    monthly_trend: List[Dict[str, Any]] = list(trend.values())

    budgeted = {budget.category for budget in snapshot.budgets}
    total_limit = sum(budget.limit for budget in snapshot.budgets)
    tracked = sum(
        tx.amount for tx in transactions
        if tx.type == 'expense' and tx.category in budgeted
        and tx.date.year == today.year and tx.date.month == today.month
    )

    top_goal = snapshot.goals[0] if snapshot.goals else None

    return {
        "income": income,
        "expense": expense,
        "balance": income - expense,
        "savings_rate": (income - expense) / income * 100 if income > 0 else 0.0,
        "monthly_income": income / month_count,
        "monthly_expense": expense / month_count,
        "category_breakdown": category_breakdown,
        "monthly_trend": monthly_trend,
        "budget_health": {
            "used": tracked,
            "limit": total_limit,
            "percentage": min(100.0, tracked / total_limit * 100) if total_limit > 0 else 0.0,
        },
        "top_goal": goal_progress(top_goal, today).model_dump(mode='json') if top_goal else None,
        "unread_notifications": sum(1 for n in snapshot.notifications if not n.read),
    }
