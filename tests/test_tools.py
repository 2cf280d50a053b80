"""Tests for the tool registry and built-in tools."""

import asyncio
import contextlib
import random
import time

import pytest
import requests

from phone_advisor.tools.catalog import CatalogError, HttpProductCatalog, InMemoryProductCatalog
from phone_advisor.tools.phone_search import PhoneDatabaseTool
from phone_advisor.tools.pricing import PriceComparisonTool, cheapest_in_stock
from phone_advisor.tools.recommendations import rank_phones, score_phone
from phone_advisor.tools.registry import ToolRegistry
from tests.conftest import RaisingTool

GAMER_PROFILE = {
    "preferences": {"budget_range": "high", "primary_use": "gaming", "brand_loyalty": ["Asus"]},
}


def _offer(retailer, price, availability="in_stock"):
    return {
        "retailer": retailer, "price": price, "availability": availability,
        "shipping": "free", "rating": 4,
    }


class TestRegistry:
    def test_default_tools_registered(self, registry):
        assert set(registry.get_tool_names()) == {
            "customer_profile_analysis",
            "phone_database_search",
            "price_comparison",
            "review_analysis",
            "generate_recommendations",
            "send_notification",
        }

    def test_definitions_describe_tools(self, registry):
        definitions = {d.name: d for d in registry.get_all_tools()}
        assert definitions["price_comparison"].category == "api"
        assert "phone_model" in definitions["price_comparison"].parameters

    @pytest.mark.asyncio
    async def test_unknown_tool_fails_cleanly(self, registry):
        result = await registry.execute_tool("teleport", {})
        assert not result.success
        assert result.error == "Tool 'teleport' not found"

    @pytest.mark.asyncio
    async def test_raising_tool_becomes_failure(self):
        registry = ToolRegistry([RaisingTool("boom")])
        result = await registry.execute_tool("boom", {})
        assert not result.success
        assert result.error == "catalog exploded"

    def test_register_replaces_same_name(self, registry):
        replacement = RaisingTool("price_comparison")
        registry.register_tool(replacement)
        assert registry.get_tool("price_comparison") is replacement
        assert len(registry.get_tool_names()) == 6


class TestPhoneSearch:
    @pytest.mark.asyncio
    async def test_query_matches_audience(self, registry):
        result = await registry.execute_tool("phone_database_search", {"query": "gaming"})
        assert result.success
        assert {p["id"] for p in result.data} == {"rog-phone-8", "poco-f6"}

    @pytest.mark.asyncio
    async def test_unmatched_query_returns_everything(self, registry):
        result = await registry.execute_tool("phone_database_search", {"query": "zzz"})
        assert len(result.data) == 7

    @pytest.mark.asyncio
    async def test_brand_and_price_filters(self, registry):
        result = await registry.execute_tool(
            "phone_database_search", {"brand": "samsung", "price_range": "low"}
        )
        assert [p["id"] for p in result.data] == ["galaxy-a35"]

    @pytest.mark.asyncio
    async def test_limit_keeps_total(self, registry):
        result = await registry.execute_tool("phone_database_search", {"limit": 2})
        assert len(result.data) == 2
        assert result.metadata["total"] == 7

    @pytest.mark.asyncio
    async def test_catalog_error_becomes_failure(self, monkeypatch):
        def fail(*args, **kwargs):
            raise requests.exceptions.ConnectionError("refused")

        monkeypatch.setattr(requests, "post", fail)
        tool = PhoneDatabaseTool(HttpProductCatalog("http://catalog.invalid/search"))
        result = await tool.execute({"query": "pixel"})
        assert not result.success
        assert "refused" in result.error

    @pytest.mark.asyncio
    async def test_slow_http_search_leaves_event_loop_running(self, monkeypatch):
        class FakeResponse:
            def raise_for_status(self):
                pass

            def json(self):
                return {"phones": [{"id": "p1"}], "total": 1}

        def slow_post(*args, **kwargs):
            time.sleep(0.3)
            return FakeResponse()

        ticks = 0

        async def ticker():
            nonlocal ticks
            while True:
                await asyncio.sleep(0.02)
                ticks += 1

        monkeypatch.setattr(requests, "post", slow_post)
        ticker_task = asyncio.create_task(ticker())
        tool = PhoneDatabaseTool(HttpProductCatalog("http://catalog.test/search"))
        result = await tool.execute({"query": "pixel"})
        ticker_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await ticker_task

        assert result.success
        assert result.data == [{"id": "p1"}]
        assert ticks >= 5


class TestHttpCatalog:
    def test_posts_filters_and_decodes(self, monkeypatch):
        captured = {}

        class FakeResponse:
            def raise_for_status(self):
                pass

            def json(self):
                return {"phones": [{"id": "p1"}]}

        def fake_post(url, json, headers, timeout):
            captured.update(url=url, json=json, headers=headers)
            return FakeResponse()

        monkeypatch.setattr(requests, "post", fake_post)
        catalog = HttpProductCatalog("http://catalog.test/search", auth_token="secret")
        payload = catalog.search({"brand": "Google"})

        assert payload == {"phones": [{"id": "p1"}], "total": 1}
        assert captured["json"] == {"brand": "Google"}
        assert captured["headers"]["Authorization"] == "Bearer secret"

    def test_bad_json_raises_catalog_error(self, monkeypatch):
        class FakeResponse:
            def raise_for_status(self):
                pass

            def json(self):
                raise ValueError("no json")

        monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse())
        with pytest.raises(CatalogError):
            HttpProductCatalog("http://catalog.test/search").search({})


class TestPriceComparison:
    def test_best_deal_skips_out_of_stock(self):
        offers = [
            _offer("Amazon", 300, "out_of_stock"),
            _offer("Best Buy", 350),
            _offer("Carrier Direct", 400),
        ]
        assert cheapest_in_stock(offers)["retailer"] == "Best Buy"

    def test_no_stock_means_no_deal(self):
        assert cheapest_in_stock([_offer("Amazon", 300, "out_of_stock")]) is None

    @pytest.mark.asyncio
    async def test_offers_sorted_by_price(self):
        tool = PriceComparisonTool(random.Random(1))
        result = await tool.execute({"phone_model": "Pixel 9 Pro"})
        prices = [o["price"] for o in result.data["prices"]]
        assert prices == sorted(prices)
        assert len(prices) == 4
        assert all(200 <= p < 700 for p in prices)
        assert result.data["best_deal"] == cheapest_in_stock(result.data["prices"])

    @pytest.mark.asyncio
    async def test_custom_retailers(self):
        tool = PriceComparisonTool(random.Random(1))
        result = await tool.execute({"retailers": ["Shop A"]})
        assert [o["retailer"] for o in result.data["prices"]] == ["Shop A"]


class TestRecommendationScoring:
    def test_all_signals_cap_at_one(self):
        phone = {"price_range": "high", "target_audience": ["gaming"], "brand": "Asus"}
        assert score_phone(phone, GAMER_PROFILE) == pytest.approx(1.0)

    def test_no_signals_scores_base(self):
        phone = {"price_range": "low", "target_audience": ["business"], "brand": "Nokia"}
        assert score_phone(phone, GAMER_PROFILE) == pytest.approx(0.5)

    def test_no_profile_scores_base(self):
        assert score_phone({"price_range": "mid"}, None) == pytest.approx(0.5)

    def test_empty_budget_never_matches(self):
        profile = {"preferences": {"budget_range": ""}}
        assert score_phone({"price_range": ""}, profile) == pytest.approx(0.5)

    def test_brand_object_is_accepted(self):
        phone = {"brand": {"name": "Asus"}}
        assert score_phone(phone, GAMER_PROFILE) == pytest.approx(0.6)

    def test_ranking_is_stable_and_truncated(self):
        phones = [{"id": str(i), "price_range": "low"} for i in range(7)]
        phones.append({"id": "match", "price_range": "high"})
        ranked = rank_phones(phones, GAMER_PROFILE, top_k=5)
        assert [p["id"] for p in ranked] == ["match", "0", "1", "2", "3"]

    def test_gaming_reason(self):
        phone = {"target_audience": ["gamers"]}
        ranked = rank_phones([phone], GAMER_PROFILE)
        assert "Optimized for gaming performance" in ranked[0]["reasons"]

    @pytest.mark.asyncio
    async def test_tool_ranks_catalog(self, registry):
        result = await registry.execute_tool(
            "generate_recommendations", {"customer_profile": GAMER_PROFILE}
        )
        recs = result.data["recommendations"]
        assert len(recs) == 5
        assert recs[0]["id"] == "rog-phone-8"
        assert recs[0]["score"] == pytest.approx(1.0)
        assert result.data["algorithm"] == "profile_based_scoring"


class TestOtherTools:
    @pytest.mark.asyncio
    async def test_customer_profile_for_known_customer(self, registry, memory):
        memory.update_customer_profile(
            "cust-1", {"preferences": {"primary_use": "photography"}}
        )
        result = await registry.execute_tool(
            "customer_profile_analysis", {"customer_id": "cust-1"}
        )
        assert result.data["known_customer"] is True
        assert result.data["preferences"]["primary_use"] == "photography"

    @pytest.mark.asyncio
    async def test_customer_profile_for_anonymous_session(self, registry):
        result = await registry.execute_tool("customer_profile_analysis", {"customer_id": None})
        assert result.success
        assert result.data["known_customer"] is False
        assert result.data["insights"]["persona"] == "feature_seeker"

    @pytest.mark.asyncio
    async def test_review_analysis_ranges(self, registry):
        result = await registry.execute_tool("review_analysis", {"phone_id": "pixel-9-pro"})
        assert 3.0 <= result.data["overall_rating"] <= 5.0
        assert result.metadata["phone_id"] == "pixel-9-pro"

    @pytest.mark.asyncio
    async def test_notification_receipt(self, registry):
        result = await registry.execute_tool(
            "send_notification", {"customer_id": "cust-1", "type": "sms", "message": "hi"}
        )
        assert result.data["status"] == "sent"
        assert result.data["notification_id"].startswith("notif_")


class TestInMemoryCatalog:
    def test_features_filter(self):
        catalog = InMemoryProductCatalog()
        payload = catalog.search({"features": ["Pro Camera"]})
        assert {p["id"] for p in payload["phones"]} == {"pixel-9-pro", "iphone-16-pro"}
