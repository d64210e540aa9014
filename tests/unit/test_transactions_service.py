from datetime import date
from unittest.mock import AsyncMock

import pytest

from models.transaction import Category, TransactionInput
from services import transactions_service
from services.ai_fallback import FallbackClassifier
from services.store import NotFoundError


def _stub_classifier(category: Category = Category.SHOPPING):
    classifier = AsyncMock()
    classifier.classify = AsyncMock(return_value=category)
    return classifier


async def test_create_expense_uses_classifier(empty_store):
    classifier = _stub_classifier(Category.HEALTH)
    data = TransactionInput(date=date(2024, 6, 1), description="Yoga class", amount=25, type="expense")

    tx = await transactions_service.create_transaction(empty_store, classifier, data)

    assert tx.category == Category.HEALTH
    assert empty_store.transactions == (tx,)
    classifier.classify.assert_awaited_once_with("Yoga class", 25)


async def test_create_income_is_salary_without_classifier(empty_store):
    classifier = _stub_classifier()
    data = TransactionInput(date=date(2024, 6, 1), description="Freelance gig", amount=900, type="income")

    tx = await transactions_service.create_transaction(empty_store, classifier, data)

    assert tx.category == Category.SALARY
    classifier.classify.assert_not_awaited()


async def test_update_keeps_category_when_description_unchanged(empty_store):
    created = await transactions_service.create_transaction(
        empty_store, _stub_classifier(Category.FOOD),
        TransactionInput(date=date(2024, 6, 1), description="Bistro", amount=40),
    )
    classifier = _stub_classifier(Category.OTHER)

    updated = await transactions_service.update_transaction(
        empty_store, classifier, created.id,
        TransactionInput(date=date(2024, 6, 2), description="Bistro", amount=55),
    )

    assert updated.category == Category.FOOD
    assert updated.amount == 55
    classifier.classify.assert_not_awaited()


async def test_update_income_to_expense_recategorizes_same_description(empty_store):
    created = await transactions_service.create_transaction(
        empty_store, _stub_classifier(),
        TransactionInput(date=date(2024, 6, 1), description="Amazon", amount=30, type="income"),
    )
    classifier = _stub_classifier(Category.SHOPPING)

    updated = await transactions_service.update_transaction(
        empty_store, classifier, created.id,
        TransactionInput(date=date(2024, 6, 1), description="Amazon", amount=30, type="expense"),
    )

    assert created.category == Category.SALARY
    assert updated.category == Category.SHOPPING
    classifier.classify.assert_awaited_once_with("Amazon", 30)


async def test_update_recategorizes_new_description(empty_store):
    created = await transactions_service.create_transaction(
        empty_store, FallbackClassifier(),
        TransactionInput(date=date(2024, 6, 1), description="Bistro", amount=40),
    )

    updated = await transactions_service.update_transaction(
        empty_store, FallbackClassifier(), created.id,
        TransactionInput(date=date(2024, 6, 1), description="Netflix", amount=15.99),
    )

    assert updated.id == created.id
    assert updated.category == Category.SUBSCRIPTIONS
    assert len(empty_store.transactions) == 1


async def test_update_unknown_id(empty_store):
    with pytest.raises(NotFoundError):
        await transactions_service.update_transaction(
            empty_store, FallbackClassifier(), "nope",
            TransactionInput(date=date(2024, 6, 1), description="x", amount=1),
        )


def test_list_filters(empty_store, make_tx):
    empty_store.add_transactions([
        make_tx("Whole Foods", 80, Category.FOOD, on=date(2024, 6, 10)),
        make_tx("Uber", 20, Category.TRAVEL, on=date(2024, 6, 5)),
        make_tx("Netflix", 15.99, Category.SUBSCRIPTIONS, on=date(2024, 5, 20)),
    ])

    def descriptions(**filters):
        return [tx.description for tx in transactions_service.list_transactions(empty_store, **filters)]

    assert descriptions() == ["Whole Foods", "Uber", "Netflix"]
    assert descriptions(search="foods") == ["Whole Foods"]
    assert descriptions(search="travel") == ["Uber"]
    assert descriptions(category=Category.SUBSCRIPTIONS) == ["Netflix"]
    assert descriptions(date_from=date(2024, 6, 5), date_to=date(2024, 6, 5)) == ["Uber"]
