import os
import uuid
from datetime import date

# The remote AI services must never be reached from the test suite
os.environ["AI_ENABLED"] = "false"
os.environ.setdefault("AI_RATE_LIMIT", "1000/minute")

import pytest
from httpx import ASGITransport, AsyncClient

from models.transaction import Category, Transaction
from services.ai_fallback import FallbackClassifier, FallbackSummarizer
from services.mock_data import generate_snapshot
from services.store import FinanceSnapshot, FinanceStore


def make_transaction(
    description: str = "Coffee",
    amount: float = 10.0,
    category: Category = Category.FOOD,
    tx_type: str = "expense",
    on: date | None = None,
) -> Transaction:
    return Transaction(
        id=str(uuid.uuid4()),
        date=on or date.today(),
        description=description,
        amount=amount,
        category=category,
        type=tx_type,
    )


@pytest.fixture
def make_tx():
    return make_transaction


@pytest.fixture
def empty_store() -> FinanceStore:
    return FinanceStore(snapshot=FinanceSnapshot())


@pytest.fixture
def seeded_store() -> FinanceStore:
    return FinanceStore(factory=lambda: generate_snapshot(seed=42))


@pytest.fixture
async def app_client(empty_store: FinanceStore):
    """Client over the ASGI app with an empty store and local-only AI collaborators."""
    from main import app, app_state, init_app_state

    init_app_state(
        store=empty_store,
        classifier=FallbackClassifier(),
        summarizer=FallbackSummarizer(),
        chat_call=None,
        use_remote=False,
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app_state.clear()


@pytest.fixture
def client(app_client: AsyncClient) -> AsyncClient:
    return app_client
