"""Generates the demo data the store is seeded with on start-up and on reset."""
import random
import uuid
from datetime import date, timedelta
from typing import List, Optional

from models.budget import Budget
from models.goal import SavingGoal
from models.profile import AppNotification, UserProfile
from models.transaction import Category, Transaction
from services.store import FinanceSnapshot

MONTHS_OF_HISTORY = 7

# (description, category, min, max, fixed amount, occurrences per month)
VARIABLE_EXPENSES = [
    ('Whole Foods Market', Category.FOOD, 120, 280, None, 3),
    ('Shell Station', Category.TRAVEL, 40, 70, None, 2),
    ('Uber', Category.TRAVEL, 15, 45, None, 3),
    ('Netflix', Category.SUBSCRIPTIONS, None, None, 15.99, 1),
    ('Spotify', Category.SUBSCRIPTIONS, None, None, 9.99, 1),
    ('Amazon Purchase', Category.SHOPPING, 25, 150, None, 2),
    ('Local Bistro', Category.FOOD, 40, 90, None, 3),
    ('Morning Coffee', Category.FOOD, 5, 12, None, 6),
]

# month offset -> (day, description, amount, category)
ONE_OFF_EXPENSES = {
    1: (12, 'Flight to NY', 450.00, Category.TRAVEL),
    3: (22, 'Car Service & Repair', 750.00, Category.OTHER),
    4: (5, 'New iPhone', 999.00, Category.SHOPPING),
}


def _month_start(today: date, offset: int) -> date:
    month_index = today.year * 12 + (today.month - 1) - offset
    return date(month_index // 12, month_index % 12 + 1, 1)


def _tx(day: date, description: str, amount: float, category: Category, tx_type: str) -> Transaction:
    return Transaction(
        id=str(uuid.uuid4()),
        date=day,
        description=description,
        amount=round(amount, 2),
        category=category,
        type=tx_type,
    )


def generate_transactions(today: date, rng: random.Random) -> List[Transaction]:
    """Seven months of salary, rent, utilities and everyday spending, newest first."""
    transactions: List[Transaction] = []
    for offset in range(MONTHS_OF_HISTORY):
        start = _month_start(today, offset)

        salary, description = 5200.0, 'Tech Solutions Salary'
        if offset == 2:
            salary, description = salary + 1500, 'Salary + Q3 Bonus'
        if offset == 5:
            salary += 800
        transactions.append(_tx(start.replace(day=28), description, salary, Category.SALARY, 'income'))
        transactions.append(_tx(start.replace(day=3), 'City Luxury Apartments', 1600, Category.RENT, 'expense'))

        is_winter = start.month <= 2 or start.month >= 11
        utility = 180 + rng.random() * 40 if is_winter else 120 + rng.random() * 30
        transactions.append(_tx(start.replace(day=15), 'Electric & Internet', utility, Category.UTILITIES, 'expense'))

        for desc, category, low, high, fixed, count in VARIABLE_EXPENSES:
            for _ in range(count):
                amount = fixed if fixed is not None else rng.randint(low, high)
                day = start + timedelta(days=rng.randint(0, 26))
                transactions.append(_tx(day, desc, amount, category, 'expense'))

        if offset in ONE_OFF_EXPENSES:
            day, desc, amount, category = ONE_OFF_EXPENSES[offset]
            transactions.append(_tx(start.replace(day=day), desc, amount, category, 'expense'))

    # stable sort keeps generation order within a day
    return sorted(transactions, key=lambda tx: tx.date, reverse=True)


def default_budgets() -> List[Budget]:
    return [
        Budget(category=Category.FOOD, limit=700),
        Budget(category=Category.RENT, limit=1600),
        Budget(category=Category.ENTERTAINMENT, limit=300),
        Budget(category=Category.SHOPPING, limit=500),
        Budget(category=Category.TRAVEL, limit=400),
    ]


def default_goals(today: date) -> List[SavingGoal]:
    return [
        SavingGoal(id='1', name='Emergency Fund', target_amount=10000, current_amount=4200, deadline=today + timedelta(days=240)),
        SavingGoal(id='2', name='MacBook Pro', target_amount=2500, current_amount=1900, deadline=today + timedelta(days=30)),
        SavingGoal(id='3', name='Japan Trip', target_amount=6000, current_amount=1500, deadline=today + timedelta(days=330)),
    ]


def default_notifications() -> List[AppNotification]:
    return [
        AppNotification(id='1', title='Salary Received', message='Your salary of $5,200 has been credited to your account.', type='success', read=False, time='2h ago'),
        AppNotification(id='2', title='Budget Alert', message='You have used 85% of your Dining budget for this month.', type='alert', read=False, time='5h ago'),
        AppNotification(id='3', title='Goal Reached', message='Congratulations! You hit 25% of your Japan Trip savings goal.', type='info', read=True, time='1d ago'),
        AppNotification(id='4', title='New Feature', message='Check out the new AI Insights tab for personalized tips.', type='info', read=True, time='2d ago'),
    ]


def default_profile() -> UserProfile:
    return UserProfile(name='Ribhav Jain', email='ribhav.jain@example.com', member_since='January 2024', currency='USD')


def generate_snapshot(today: Optional[date] = None, seed: Optional[int] = None) -> FinanceSnapshot:
    today = today or date.today()
    rng = random.Random(seed)
    return FinanceSnapshot(
        transactions=tuple(generate_transactions(today, rng)),
        budgets=tuple(default_budgets()),
        goals=tuple(default_goals(today)),
        notifications=tuple(default_notifications()),
        profile=default_profile(),
    )
