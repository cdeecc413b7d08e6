"""Tests for the fetch/enrich cycle."""

from datetime import timedelta

import pytest

from conftest import StubFetcher, make_record
from trendfeed.ingestor.rss import FeedFetchError, parse_trends_feed
from trendfeed.trender.history import HistoryStore
from trendfeed.trender.pipeline import TrendPipeline


class TestTrendPipeline:

    @pytest.mark.asyncio
    async def test_enriches_sample_feed(self, sample_trends_xml, clock):
        pipeline = TrendPipeline(StubFetcher(parse_trends_feed(sample_trends_xml)), HistoryStore(), clock)

        snapshot = await pipeline.run()

        assert snapshot.total_items == 2
        assert snapshot.last_updated == clock.now
        world_series, eclipse = snapshot.items

        assert world_series.metrics.traffic_number == 2_000_000
        # Published 2026-10-19 03:00 UTC, now 12:00 UTC
        assert world_series.metrics.hours_since_trending == 9
        assert world_series.metrics.trend_velocity == 0
        assert [n.title for n in world_series.news_items] == ["Dodgers force Game 7", "How to watch Game 7"]
        assert world_series.timestamp == clock.now

        assert eclipse.metrics.traffic_number == 500_000
        assert eclipse.metrics.hours_since_trending == 4
        assert eclipse.picture is None

    @pytest.mark.asyncio
    async def test_velocity_from_successive_cycles(self, clock):
        fetcher = StubFetcher([make_record("topic", "100K+")])
        pipeline = TrendPipeline(fetcher, HistoryStore(), clock)
        await pipeline.run()

        fetcher.results = [[make_record("topic", "300K+")]]
        clock.now += timedelta(hours=2)
        snapshot = await pipeline.run()

        assert snapshot.items[0].metrics.trend_velocity == pytest.approx(100_000.0)

    @pytest.mark.asyncio
    async def test_failed_fetch_leaves_history_untouched(self, clock):
        history = HistoryStore()
        fetcher = StubFetcher([make_record("topic")])
        pipeline = TrendPipeline(fetcher, history, clock)
        await pipeline.run()

        fetcher.results = [FeedFetchError("boom")]
        with pytest.raises(FeedFetchError):
            await pipeline.run()

        assert len(history.samples("topic")) == 1

    @pytest.mark.asyncio
    async def test_failure_mid_cycle_leaves_history_untouched(self, clock):
        history = HistoryStore()
        fetcher = StubFetcher([make_record("topic")])
        pipeline = TrendPipeline(fetcher, history, clock)
        await pipeline.run()
        before = history.samples("topic")

        fetcher.results = [[
            make_record("topic", "900K+"),
            make_record("fresh"),
            make_record("broken", pub_date=12345),
        ]]
        clock.now += timedelta(hours=1)
        with pytest.raises(AttributeError):
            await pipeline.run()

        assert history.samples("topic") == before
        assert "fresh" not in history
        assert "broken" not in history
        assert len(history) == 1

    @pytest.mark.asyncio
    async def test_output_keeps_feed_order(self, clock):
        titles = ["c", "a", "b"]
        pipeline = TrendPipeline(StubFetcher([make_record(t) for t in titles]), HistoryStore(), clock)

        snapshot = await pipeline.run()

        assert [item.title for item in snapshot.items] == titles

    @pytest.mark.asyncio
    async def test_missing_traffic_and_bad_date_degrade(self, clock):
        record = make_record("odd", traffic=None, pub_date="not a date")
        pipeline = TrendPipeline(StubFetcher([record]), HistoryStore(), clock)

        item = (await pipeline.run()).items[0]

        assert item.traffic == "N/A"
        assert item.metrics.traffic_number == 0
        assert item.metrics.hours_since_trending is None

    @pytest.mark.asyncio
    async def test_single_news_mapping_is_normalized(self, clock):
        record = make_record("one", news={"title": "Lone story", "snippet": "s", "url": "https://example.com"})
        pipeline = TrendPipeline(StubFetcher([record]), HistoryStore(), clock)

        item = (await pipeline.run()).items[0]

        assert [n.title for n in item.news_items] == ["Lone story"]

    @pytest.mark.asyncio
    async def test_untitled_records_are_skipped(self, clock):
        pipeline = TrendPipeline(StubFetcher([make_record(""), make_record("kept")]), HistoryStore(), clock)

        snapshot = await pipeline.run()

        assert snapshot.total_items == 1
        assert snapshot.items[0].title == "kept"

    @pytest.mark.asyncio
    async def test_absent_titles_are_evicted(self, clock):
        history = HistoryStore(evict_after_cycles=1)
        fetcher = StubFetcher([make_record("first")])
        pipeline = TrendPipeline(fetcher, history, clock)
        await pipeline.run()

        fetcher.results = [[make_record("second")]]
        await pipeline.run()

        assert "first" not in history
        assert "second" in history
