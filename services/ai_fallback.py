"""Remote (LLM) classifier and summarizer, and the wrappers that fall back to the local rules."""
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Generic, List, Optional, Protocol, Sequence, TypeVar

from pydantic import ValidationError

from models.insight import Insight, InsightList
from models.transaction import CATEGORY_LABELS, Category, Transaction
from services.categorizer import LocalClassifier
from services.insights_service import LocalSummarizer
from utils import openai_agent

logger = logging.getLogger(__name__)

T = TypeVar("T")

REMOTE_INSIGHT_WINDOW = 50


@dataclass(frozen=True)
class RemoteResult(Generic[T]):
    """Outcome of a remote attempt: either a value or the reason it was unusable."""
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "RemoteResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "RemoteResult[T]":
        return cls(error=error)


class Classifier(Protocol):
    async def classify(self, description: str, amount: Optional[float] = None) -> Category: ...


class Summarizer(Protocol):
    async def summarize(self, transactions: Sequence[Transaction], now: date | datetime) -> List[Insight]: ...


# --- Remote implementations ---

def parse_category_reply(reply: Any) -> RemoteResult[Category]:
    text = str(reply or "").strip()
    if text in CATEGORY_LABELS:
        return RemoteResult.success(Category(text))
    return RemoteResult.failure(f"Reply {text[:40]!r} is not a known category.")


def parse_insights_payload(payload: Any) -> RemoteResult[List[Insight]]:
    """
    Accepts the agent's structured InsightList, a list, or JSON text.
    Anything that is not a non-empty array of {title, description, type} is a failure.
    """
    if isinstance(payload, InsightList):
        items: Any = payload.insights
    elif isinstance(payload, str):
        try:
            items = json.loads(payload)
        except json.JSONDecodeError as e:
            return RemoteResult.failure(f"Reply is not valid JSON: {e}")
    else:
        items = payload

    if not isinstance(items, list):
        return RemoteResult.failure(f"Expected a JSON array, got {type(items).__name__}.")
    if not items:
        return RemoteResult.failure("Reply is an empty array.")
    try:
        insights = [item if isinstance(item, Insight) else Insight.model_validate(item) for item in items]
    except ValidationError as e:
        return RemoteResult.failure(f"Insight objects have the wrong shape: {e.error_count()} errors.")
    return RemoteResult.success(insights)


class RemoteClassifier:
    def __init__(self, call: Callable[[str, float], Awaitable[Any]] = openai_agent.classify_with_agent):
        self._call = call

    async def try_classify(self, description: str, amount: Optional[float] = None) -> RemoteResult[Category]:
        try:
            reply = await self._call(description, amount if amount is not None else 0.0)
        except Exception as e:
            return RemoteResult.failure(f"{type(e).__name__}: {e}")
        return parse_category_reply(reply)


class RemoteSummarizer:
    def __init__(self, call: Callable[[Sequence[Transaction]], Awaitable[Any]] = openai_agent.generate_insights_with_agent):
        self._call = call

    async def try_summarize(self, transactions: Sequence[Transaction]) -> RemoteResult[List[Insight]]:
        recent = sorted(transactions, key=lambda tx: tx.date, reverse=True)[:REMOTE_INSIGHT_WINDOW]
        try:
            payload = await self._call(recent)
        except Exception as e:
            return RemoteResult.failure(f"{type(e).__name__}: {e}")
        return parse_insights_payload(payload)


# --- Fallback composition ---

class FallbackClassifier:
    """Uses the remote classifier when it yields a known label, the keyword rules otherwise."""

    def __init__(self, remote: Optional[RemoteClassifier] = None, local: Optional[LocalClassifier] = None):
        self.remote = remote
        self.local = local or LocalClassifier()

    async def classify(self, description: str, amount: Optional[float] = None) -> Category:
        if self.remote is not None:
            result = await self.remote.try_classify(description, amount)
            if result.ok:
                return result.value
            logger.warning(f"AI categorization failed, using fallback. {result.error}")
        return await self.local.classify(description, amount)


class FallbackSummarizer:
    """Uses the remote summarizer when it yields usable insights, the local aggregation otherwise."""

    def __init__(self, remote: Optional[RemoteSummarizer] = None, local: Optional[LocalSummarizer] = None):
        self.remote = remote
        self.local = local or LocalSummarizer()

    async def summarize(self, transactions: Sequence[Transaction], now: date | datetime) -> List[Insight]:
        if self.remote is not None:
            result = await self.remote.try_summarize(transactions)
            if result.ok:
                return result.value
            logger.warning(f"Insights generation failed, using fallback. {result.error}")
        return await self.local.summarize(transactions, now)


def build_classifier(use_remote: bool) -> FallbackClassifier:
    return FallbackClassifier(remote=RemoteClassifier() if use_remote else None)


def build_summarizer(use_remote: bool) -> FallbackSummarizer:
    return FallbackSummarizer(remote=RemoteSummarizer() if use_remote else None)
