"""Conversational Q&A over the user's financial context."""
import json
import logging
from typing import Awaitable, Callable, Dict, Optional, Sequence

from models.transaction import Transaction
from utils import openai_agent

logger = logging.getLogger(__name__)

CONTEXT_RECENT_COUNT = 10

EMPTY_REPLY_MESSAGE = "I couldn't process that request."
UNAVAILABLE_MESSAGE = (
    "I'm currently unable to connect to the AI service. However, you can view your spending summaries "
    "in the Dashboard or check AI Insights for auto-generated tips!"
)

ChatCall = Callable[[str, str], Awaitable[str]]


def build_financial_context(transactions: Sequence[Transaction]) -> str:
    """Totals, net, expense breakdown by category and the latest transactions, as plain text."""
    total_income = sum(tx.amount for tx in transactions if tx.type == 'income')
    total_expense = sum(tx.amount for tx in transactions if tx.type == 'expense')

    by_category: Dict[str, float] = {}
    for tx in transactions:
        if tx.type == 'expense':
            by_category[tx.category.value] = by_category.get(tx.category.value, 0.0) + tx.amount

    recent = [
        f"{tx.date.isoformat()}: {tx.description} ({tx.amount})"
        for tx in transactions[:CONTEXT_RECENT_COUNT]
    ]

    return "\n".join([
        "User Financial Context:",
        f"Total Income: {total_income}",
        f"Total Expense: {total_expense}",
        f"Net: {total_income - total_expense}",
        f"Expense Breakdown: {json.dumps(by_category)}",
        f"Recent Transactions (Last {CONTEXT_RECENT_COUNT}): {json.dumps(recent)}",
    ])


async def answer(query: str, transactions: Sequence[Transaction], call: Optional[ChatCall] = None) -> str:
    """
    Returns the assistant's reply verbatim, or a fixed apology when the AI
    service is unavailable or fails. There is no local answer.
    """
    if call is None:
        logger.info("Chat requested but no AI service is configured.")
        return UNAVAILABLE_MESSAGE
    context = build_financial_context(transactions)
    try:
        reply = await call(query, context)
    except Exception as e:
        logger.error(f"Chat failed: {e}")
        return UNAVAILABLE_MESSAGE
    return reply or EMPTY_REPLY_MESSAGE


def build_chat_call(use_remote: bool) -> Optional[ChatCall]:
    return openai_agent.chat_with_agent if use_remote else None
