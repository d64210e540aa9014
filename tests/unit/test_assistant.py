from datetime import date
from unittest.mock import AsyncMock

from models.transaction import Category
from services.assistant_service import (
    EMPTY_REPLY_MESSAGE,
    UNAVAILABLE_MESSAGE,
    answer,
    build_financial_context,
)


def test_context_contains_totals_and_breakdown(make_tx):
    txs = [
        make_tx("Salary", 1000, Category.SALARY, "income", on=date(2024, 6, 1)),
        make_tx("Groceries", 150, Category.FOOD, on=date(2024, 6, 2)),
        make_tx("Uber", 50, Category.TRAVEL, on=date(2024, 6, 3)),
    ]

    context = build_financial_context(txs)

    assert "Total Income: 1000.0" in context
    assert "Total Expense: 200.0" in context
    assert "Net: 800.0" in context
    assert '"Food": 150.0' in context
    assert "2024-06-02: Groceries (150.0)" in context


def test_context_lists_only_last_ten(make_tx):
    txs = [make_tx(f"Item {i}", 1) for i in range(12)]

    context = build_financial_context(txs)

    assert "Item 9" in context
    assert "Item 10" not in context


async def test_answer_returns_reply_verbatim(make_tx):
    call = AsyncMock(return_value="You spent most on Food.")

    reply = await answer("Where does my money go?", [make_tx()], call)

    assert reply == "You spent most on Food."
    query, context = call.await_args.args
    assert query == "Where does my money go?"
    assert context.startswith("User Financial Context:")


async def test_answer_apologises_on_failure():
    reply = await answer("hi", [], AsyncMock(side_effect=ConnectionError("down")))

    assert reply == UNAVAILABLE_MESSAGE


async def test_answer_without_service():
    assert await answer("hi", [], None) == UNAVAILABLE_MESSAGE


async def test_empty_reply():
    assert await answer("hi", [], AsyncMock(return_value="")) == EMPTY_REPLY_MESSAGE
