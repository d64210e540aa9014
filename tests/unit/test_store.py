from datetime import date

import pytest

from models.budget import Budget
from models.goal import SavingGoal
from models.profile import AppNotification, UserProfile
from models.transaction import Category
from services.store import FinanceSnapshot, FinanceStore, NotFoundError


class TestTransactions:
    def test_add_prepends(self, empty_store, make_tx):
        first, second = make_tx("First"), make_tx("Second")
        empty_store.add_transaction(first)
        empty_store.add_transaction(second)

        assert [tx.description for tx in empty_store.transactions] == ["Second", "First"]

    def test_batch_keeps_its_order(self, empty_store, make_tx):
        empty_store.add_transaction(make_tx("Old"))
        empty_store.add_transactions([make_tx("A"), make_tx("B")])

        assert [tx.description for tx in empty_store.transactions] == ["A", "B", "Old"]

    def test_duplicate_id_rejected_without_change(self, empty_store, make_tx):
        tx = make_tx("Once")
        empty_store.add_transaction(tx)
        before = empty_store.snapshot

        with pytest.raises(ValueError):
            empty_store.add_transactions([make_tx("Fine"), tx])

        assert empty_store.snapshot is before

    def test_replace_keeps_position(self, empty_store, make_tx):
        a, b = make_tx("A"), make_tx("B")
        empty_store.add_transactions([a, b])

        empty_store.replace_transaction(a.model_copy(update={"description": "A2"}))

        assert [tx.description for tx in empty_store.transactions] == ["A2", "B"]

    def test_remove_unknown_raises(self, empty_store):
        with pytest.raises(NotFoundError):
            empty_store.remove_transaction("missing")

    def test_every_change_swaps_a_new_snapshot(self, empty_store, make_tx):
        before = empty_store.snapshot
        empty_store.add_transaction(make_tx())

        assert before.transactions == ()
        assert empty_store.snapshot is not before
        assert empty_store.version == 1


class TestBudgets:
    def test_duplicate_category_rejected(self, empty_store):
        empty_store.add_budget(Budget(category=Category.FOOD, limit=500))

        with pytest.raises(ValueError):
            empty_store.add_budget(Budget(category=Category.FOOD, limit=100))
        assert len(empty_store.snapshot.budgets) == 1

    def test_update_and_remove(self, empty_store):
        empty_store.add_budget(Budget(category=Category.RENT, limit=1600))

        assert empty_store.update_budget(Category.RENT, 1700).limit == 1700
        empty_store.remove_budget(Category.RENT)
        assert empty_store.snapshot.budgets == ()

    def test_update_missing_raises(self, empty_store):
        with pytest.raises(NotFoundError):
            empty_store.update_budget(Category.TRAVEL, 10)


class TestGoalsProfileNotifications:
    def test_goal_lifecycle(self, empty_store):
        goal = SavingGoal(id="g1", name="Bike", target_amount=800, current_amount=100, deadline=date(2025, 1, 1))
        empty_store.add_goal(goal)
        empty_store.update_goal(goal.model_copy(update={"current_amount": 300}))

        assert empty_store.get_goal("g1").current_amount == 300
        empty_store.remove_goal("g1")
        with pytest.raises(NotFoundError):
            empty_store.get_goal("g1")

    def test_profile_replaced(self, empty_store):
        profile = UserProfile(name="Sam", email="sam@example.com", member_since="May 2024", currency="EUR")

        empty_store.update_profile(profile)

        assert empty_store.snapshot.profile == profile

    def test_notifications(self):
        store = FinanceStore(snapshot=FinanceSnapshot(notifications=(
            AppNotification(id="1", title="a", message="m", type="info"),
            AppNotification(id="2", title="b", message="m", type="alert"),
        )))

        assert store.mark_notification_read("1").read is True
        store.remove_notification("2")
        assert [n.id for n in store.snapshot.notifications] == ["1"]
        assert store.clear_notifications() == 1
        assert store.snapshot.notifications == ()


def test_reset_uses_factory(make_tx):
    store = FinanceStore(factory=lambda: FinanceSnapshot(transactions=(make_tx("Seed"),)))
    store.add_transaction(make_tx("Extra"))

    store.reset()

    assert [tx.description for tx in store.transactions] == ["Seed"]
