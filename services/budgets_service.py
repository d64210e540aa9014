"""Budget progress for the current month."""
from datetime import date
from typing import List, Sequence

from models.budget import Budget, BudgetProgress
from models.transaction import Category, Transaction

NEAR_LIMIT_PERCENT = 80.0


def spent_this_month(transactions: Sequence[Transaction], category: Category, today: date) -> float:
    return sum(
        tx.amount for tx in transactions
        if tx.type == 'expense' and tx.category == category
        and tx.date.year == today.year and tx.date.month == today.month
    )


def budget_progress(budget: Budget, transactions: Sequence[Transaction], today: date) -> BudgetProgress:
    spent = spent_this_month(transactions, budget.category, today)
    percentage = min(100.0, spent / budget.limit * 100)
    is_over = spent > budget.limit
    return BudgetProgress(
        category=budget.category,
        limit=budget.limit,
        spent=spent,
        percentage=percentage,
        remaining=budget.limit - spent,
        is_over=is_over,
        is_near=percentage > NEAR_LIMIT_PERCENT and not is_over,
    )


def list_budget_progress(budgets: Sequence[Budget], transactions: Sequence[Transaction], today: date) -> List[BudgetProgress]:
    return [budget_progress(budget, transactions, today) for budget in budgets]
