"""In-memory state container holding immutable snapshots of the user's finances."""
import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Tuple

from models.budget import Budget
from models.goal import SavingGoal
from models.profile import AppNotification, UserProfile
from models.transaction import Category, Transaction

logger = logging.getLogger(__name__)


class NotFoundError(LookupError):
    """Raised when an operation names an id or category the store does not hold."""


@dataclass(frozen=True)
class FinanceSnapshot:
    transactions: Tuple[Transaction, ...] = ()
    budgets: Tuple[Budget, ...] = ()
    goals: Tuple[SavingGoal, ...] = ()
    notifications: Tuple[AppNotification, ...] = ()
    profile: UserProfile = field(default_factory=lambda: UserProfile(name="", email="", member_since=""))


class FinanceStore:
    """
    Owns the current FinanceSnapshot.

    Every operation validates against the latest snapshot, builds a new one and
    swaps it in whole, so a failed operation never leaves a partial update.
    """

    def __init__(self, snapshot: FinanceSnapshot | None = None, factory: Callable[[], FinanceSnapshot] | None = None):
        self._factory = factory
        if snapshot is None:
            snapshot = factory() if factory else FinanceSnapshot()
        self._snapshot = snapshot
        self._version = 0

    @property
    def snapshot(self) -> FinanceSnapshot:
        return self._snapshot

    @property
    def version(self) -> int:
        return self._version

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return self._snapshot.transactions

    def _swap(self, **changes) -> FinanceSnapshot:
        self._snapshot = replace(self._snapshot, **changes)
        self._version += 1
        return self._snapshot

    # --- Transactions ---

    def get_transaction(self, tx_id: str) -> Transaction:
        for tx in self._snapshot.transactions:
            if tx.id == tx_id:
                return tx
        raise NotFoundError(f"Transaction {tx_id} not found.")

    def add_transaction(self, transaction: Transaction) -> Transaction:
        self.add_transactions([transaction])
        return transaction

    def add_transactions(self, transactions: Iterable[Transaction]) -> Tuple[Transaction, ...]:
        """Prepends a batch, keeping the batch's own order."""
        batch = tuple(transactions)
        existing_ids = {tx.id for tx in self._snapshot.transactions}
        batch_ids = set()
        for tx in batch:
            if tx.id in existing_ids or tx.id in batch_ids:
                raise ValueError(f"Duplicate transaction id: {tx.id}")
            batch_ids.add(tx.id)
        self._swap(transactions=batch + self._snapshot.transactions)
        logger.debug(f"Added {len(batch)} transactions (store version {self._version}).")
        return batch

    def replace_transaction(self, updated: Transaction) -> Transaction:
        self.get_transaction(updated.id)
        self._swap(transactions=tuple(updated if tx.id == updated.id else tx for tx in self._snapshot.transactions))
        return updated

    def remove_transaction(self, tx_id: str) -> None:
        self.get_transaction(tx_id)
        self._swap(transactions=tuple(tx for tx in self._snapshot.transactions if tx.id != tx_id))

    # --- Budgets ---

    def get_budget(self, category: Category) -> Budget:
        for budget in self._snapshot.budgets:
            if budget.category == category:
                return budget
        raise NotFoundError(f"No budget for category {category.value}.")

    def add_budget(self, budget: Budget) -> Budget:
        if any(b.category == budget.category for b in self._snapshot.budgets):
            raise ValueError(f"A budget for {budget.category.value} already exists.")
        self._swap(budgets=self._snapshot.budgets + (budget,))
        return budget

    def update_budget(self, category: Category, limit: float) -> Budget:
        updated = Budget(category=self.get_budget(category).category, limit=limit)
        self._swap(budgets=tuple(updated if b.category == category else b for b in self._snapshot.budgets))
        return updated

    def remove_budget(self, category: Category) -> None:
        self.get_budget(category)
        self._swap(budgets=tuple(b for b in self._snapshot.budgets if b.category != category))

    # --- Goals ---

    def get_goal(self, goal_id: str) -> SavingGoal:
        for goal in self._snapshot.goals:
            if goal.id == goal_id:
                return goal
        raise NotFoundError(f"Goal {goal_id} not found.")

    def add_goal(self, goal: SavingGoal) -> SavingGoal:
        if any(g.id == goal.id for g in self._snapshot.goals):
            raise ValueError(f"Duplicate goal id: {goal.id}")
        self._swap(goals=self._snapshot.goals + (goal,))
        return goal

    def update_goal(self, updated: SavingGoal) -> SavingGoal:
        self.get_goal(updated.id)
        self._swap(goals=tuple(updated if g.id == updated.id else g for g in self._snapshot.goals))
        return updated

    def remove_goal(self, goal_id: str) -> None:
        self.get_goal(goal_id)
        self._swap(goals=tuple(g for g in self._snapshot.goals if g.id != goal_id))

    # --- Profile & notifications ---

    def update_profile(self, profile: UserProfile) -> UserProfile:
        self._swap(profile=profile)
        return profile

    def _get_notification(self, notification_id: str) -> AppNotification:
        for notification in self._snapshot.notifications:
            if notification.id == notification_id:
                return notification
        raise NotFoundError(f"Notification {notification_id} not found.")

    def mark_notification_read(self, notification_id: str) -> AppNotification:
        updated = self._get_notification(notification_id).model_copy(update={"read": True})
        self._swap(notifications=tuple(
            updated if n.id == notification_id else n for n in self._snapshot.notifications
        ))
        return updated

    def remove_notification(self, notification_id: str) -> None:
        self._get_notification(notification_id)
        self._swap(notifications=tuple(n for n in self._snapshot.notifications if n.id != notification_id))

    def clear_notifications(self) -> int:
        cleared = len(self._snapshot.notifications)
        self._swap(notifications=())
        return cleared

    def reset(self) -> FinanceSnapshot:
        """Swaps in a fresh default snapshot from the factory (or an empty one)."""
        fresh = self._factory() if self._factory else FinanceSnapshot()
        self._snapshot = fresh
        self._version += 1
        logger.warning(f"Store reset to defaults (version {self._version}).")
        return fresh
