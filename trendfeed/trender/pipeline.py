"""Fetch and enrichment cycle for trending searches.

One cycle:
- fetches the raw trend records from the upstream feed
- records a traffic sample per title and prunes expired samples
- computes hours since trending and velocity from the updated history
- normalizes embedded news
- builds an immutable Snapshot

History changes are made on a working copy and committed only once the
whole feed has been enriched, so a failed cycle leaves history as it was.
"""

import time
from datetime import datetime
from typing import Any, Callable, Dict

from trendfeed.core.logging import get_logger
from trendfeed.core.models import Snapshot, TrendItem, TrendMetrics
from trendfeed.core.time import hours_since, parse_feed_date, utc_now
from trendfeed.ingestor.normalizer import clean_text, normalize_news_items
from trendfeed.trender.history import HistoryStore
from trendfeed.trender.traffic import parse_traffic

logger = get_logger(__name__)


def enrich_record(record: Dict[str, Any], history: HistoryStore, now: datetime) -> TrendItem:
    """Record history for one raw trend and build its enriched item."""
    title = record["title"]
    traffic = record.get("traffic") or "N/A"
    traffic_number = parse_traffic(traffic)

    history.record(title, traffic_number, now)

    metrics = TrendMetrics(
        traffic_number=traffic_number,
        hours_since_trending=hours_since(parse_feed_date(record.get("pub_date")), now),
        trend_velocity=history.velocity(title),
    )

    return TrendItem(
        title=title,
        description=clean_text(record.get("description")),
        link=record.get("link"),
        pub_date=record.get("pub_date"),
        traffic=traffic,
        picture=record.get("picture"),
        news_items=normalize_news_items(record.get("news_item")),
        metrics=metrics,
        timestamp=now,
    )


class TrendPipeline:
    """Runs fetch/enrich cycles against a shared history."""

    def __init__(self, fetcher, history: HistoryStore, clock: Callable[[], datetime] = utc_now):
        self.fetcher = fetcher
        self.history = history
        self.clock = clock

    async def run(self) -> Snapshot:
        """
        Run one cycle and return the new snapshot.

        Fetch errors propagate to the caller untouched.
        """
        start_time = time.time()
        records = await self.fetcher.fetch()

        now = self.clock()
        working = self.history.copy()
        items = []
        for record in records:
            if not record.get("title"):
                logger.warning(f"Skipping trend without title: {record.get('link')}")
                continue
            items.append(enrich_record(record, working, now))

        working.end_cycle(item.title for item in items)
        snapshot = Snapshot.build(items, last_updated=now)
        self.history.replace_with(working)

        logger.info(
            f"Trend cycle completed in {time.time() - start_time:.2f}s: "
            f"{snapshot.total_items} items, {len(self.history)} tracked titles"
        )
        return snapshot
