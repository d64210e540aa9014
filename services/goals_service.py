"""Savings goal progress."""
from datetime import date

from models.goal import GoalProgress, SavingGoal


def goal_progress(goal: SavingGoal, today: date) -> GoalProgress:
    return GoalProgress(
        goal=goal,
        percentage=min(100.0, goal.current_amount / goal.target_amount * 100),
        remaining=goal.target_amount - goal.current_amount,
        days_left=max(0, (goal.deadline - today).days),
    )
