"""Service layer for handling transaction-related logic."""
import logging
import uuid
from datetime import date
from typing import List, Optional

from models.transaction import Category, Transaction, TransactionInput
from services.store import FinanceStore

logger = logging.getLogger(__name__)


def list_transactions(
    store: FinanceStore,
    search: Optional[str] = None,
    category: Optional[Category] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[Transaction]:
    """Store order (most recent first), narrowed by the optional filters. Date bounds are inclusive."""
    needle = (search or "").lower()
    results = []
    for tx in store.transactions:
        if needle and needle not in tx.description.lower() and needle not in tx.category.value.lower():
            continue
        if category is not None and tx.category != category:
            continue
        if date_from is not None and tx.date < date_from:
            continue
        if date_to is not None and tx.date > date_to:
            continue
        results.append(tx)
    return results


async def _resolve_category(classifier, data: TransactionInput) -> Category:
    if data.type == 'income':
        return Category.SALARY
    return await classifier.classify(data.description, data.amount)


async def create_transaction(store: FinanceStore, classifier, data: TransactionInput) -> Transaction:
    """Categorizes an expense through the classifier (income is always Salary) and prepends it."""
    category = await _resolve_category(classifier, data)
    transaction = Transaction(
        id=str(uuid.uuid4()),
        date=data.date,
        description=data.description,
        amount=data.amount,
        category=category,
        type=data.type,
    )
    store.add_transaction(transaction)
    logger.info(f"Added {transaction.type} '{transaction.description[:30]}' as {category.value}.")
    return transaction


async def update_transaction(store: FinanceStore, classifier, tx_id: str, data: TransactionInput) -> Transaction:
    """
    Replaces a transaction by id. An expense whose description did not change
    keeps its category; anything else is categorized again.
    """
    existing = store.get_transaction(tx_id)
    if data.type == 'expense' and existing.type == 'expense' and existing.description == data.description:
        category = existing.category
    else:
        category = await _resolve_category(classifier, data)

    updated = Transaction(
        id=tx_id,
        date=data.date,
        description=data.description,
        amount=data.amount,
        category=category,
        type=data.type,
    )
    store.replace_transaction(updated)
    logger.info(f"Updated transaction {tx_id} ({category.value}).")
    return updated


def delete_transaction(store: FinanceStore, tx_id: str) -> None:
    store.remove_transaction(tx_id)
    logger.info(f"Deleted transaction {tx_id}.")
