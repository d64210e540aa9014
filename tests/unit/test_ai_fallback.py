import json
from datetime import date, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from models.insight import Insight, InsightList
from models.transaction import Category
from services.ai_fallback import (
    REMOTE_INSIGHT_WINDOW,
    FallbackClassifier,
    FallbackSummarizer,
    RemoteClassifier,
    RemoteResult,
    RemoteSummarizer,
    parse_category_reply,
    parse_insights_payload,
)
from services.insights_service import summarize_insights

NOW = datetime(2024, 6, 15)


class TestRemoteResult:
    def test_success_is_ok(self):
        result = RemoteResult.success(Category.FOOD)
        assert result.ok
        assert result.value == Category.FOOD

    def test_failure_is_not_ok(self):
        result = RemoteResult.failure("timeout")
        assert not result.ok
        assert result.error == "timeout"
        assert result.value is None


class TestParseCategoryReply:
    def test_exact_label(self):
        assert parse_category_reply("Travel").value == Category.TRAVEL

    def test_surrounding_whitespace_is_stripped(self):
        assert parse_category_reply("  Health\n").value == Category.HEALTH

    @pytest.mark.parametrize("reply", ["food", "Food.", "Category: Food", "", None, "Groceries"])
    def test_anything_else_fails(self, reply):
        assert not parse_category_reply(reply).ok


class TestParseInsightsPayload:
    def test_structured_output(self):
        payload = InsightList(insights=[Insight(title="t", description="d", type="info")])
        result = parse_insights_payload(payload)
        assert result.ok
        assert result.value[0].title == "t"

    def test_json_array_text(self):
        text = json.dumps([{"title": "Dining up", "description": "More restaurants", "type": "alert"}])
        result = parse_insights_payload(text)
        assert result.ok
        assert result.value == [Insight(title="Dining up", description="More restaurants", type="alert")]

    def test_invalid_json_fails(self):
        assert not parse_insights_payload("not json [").ok

    def test_non_array_fails(self):
        assert not parse_insights_payload(json.dumps({"title": "x"})).ok

    def test_empty_array_fails(self):
        assert not parse_insights_payload("[]").ok

    def test_empty_structured_output_fails(self):
        assert not parse_insights_payload(InsightList(insights=[])).ok

    def test_wrong_type_value_fails(self):
        text = json.dumps([{"title": "x", "description": "y", "type": "warning"}])
        assert not parse_insights_payload(text).ok

    def test_missing_field_fails(self):
        assert not parse_insights_payload([{"title": "x"}]).ok


class TestFallbackClassifier:
    async def test_uses_remote_label(self):
        call = AsyncMock(return_value="Investments")
        classifier = FallbackClassifier(remote=RemoteClassifier(call=call))

        assert await classifier.classify("Coffee shop", 4.5) == Category.INVESTMENTS
        call.assert_awaited_once_with("Coffee shop", 4.5)

    async def test_falls_back_on_exception(self):
        classifier = FallbackClassifier(remote=RemoteClassifier(call=AsyncMock(side_effect=ConnectionError("down"))))

        assert await classifier.classify("Starbucks", 5) == Category.FOOD

    async def test_falls_back_on_unknown_label(self):
        classifier = FallbackClassifier(remote=RemoteClassifier(call=AsyncMock(return_value="Dining")))

        assert await classifier.classify("Uber ride", 20) == Category.TRAVEL

    async def test_local_only_without_remote(self):
        assert await FallbackClassifier().classify("Netflix", 15.99) == Category.SUBSCRIPTIONS

    async def test_missing_amount_sent_as_zero(self):
        call = AsyncMock(return_value="Other")
        await RemoteClassifier(call=call).try_classify("Thing")
        call.assert_awaited_once_with("Thing", 0.0)


class TestFallbackSummarizer:
    async def test_uses_remote_insights(self, make_tx):
        remote_insights = [Insight(title="AI", description="From the model", type="success")]
        summarizer = FallbackSummarizer(remote=RemoteSummarizer(call=AsyncMock(return_value=InsightList(insights=remote_insights))))

        assert await summarizer.summarize([make_tx(on=date(2024, 6, 1))], NOW) == remote_insights

    async def test_falls_back_on_empty_array(self, make_tx):
        txs = [make_tx("Groceries", 30, Category.FOOD, on=date(2024, 6, 3))]
        summarizer = FallbackSummarizer(remote=RemoteSummarizer(call=AsyncMock(return_value="[]")))

        assert await summarizer.summarize(txs, NOW) == summarize_insights(txs, NOW)

    async def test_falls_back_on_exception(self, make_tx):
        txs = [make_tx("Groceries", 30, Category.FOOD, on=date(2024, 6, 3))]
        summarizer = FallbackSummarizer(remote=RemoteSummarizer(call=AsyncMock(side_effect=RuntimeError("boom"))))

        insights = await summarizer.summarize(txs, NOW)

        assert [i.type for i in insights] == ["info", "alert"]

    async def test_remote_gets_fifty_most_recent(self, make_tx):
        start = date(2024, 1, 1)
        txs = [make_tx(f"Item {i}", 1, Category.OTHER, on=start + timedelta(days=i)) for i in range(60)]
        call = AsyncMock(return_value="[]")

        await RemoteSummarizer(call=call).try_summarize(txs)

        sent = call.await_args.args[0]
        assert len(sent) == REMOTE_INSIGHT_WINDOW
        assert sent[0].description == "Item 59"
        assert sent[-1].description == "Item 10"
