"""Shared fixtures for trendfeed tests."""

from datetime import datetime, timezone

import pytest

SAMPLE_TRENDS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss xmlns:ht="https://trends.google.com/trends/trendingsearches/daily" version="2.0">
  <channel>
    <title>Daily Search Trends</title>
    <link>https://trends.google.com/trends/trendingsearches/daily?geo=US</link>
    <item>
      <title>World Series</title>
      <ht:approx_traffic>2M+</ht:approx_traffic>
      <description>World Series schedule, Game 7</description>
      <link>https://trends.google.com/trends/trendingsearches/daily?geo=US#World%20Series</link>
      <pubDate>Sun, 18 Oct 2026 20:00:00 -0700</pubDate>
      <ht:picture>https://t0.gstatic.com/images?q=tbn:world-series</ht:picture>
      <ht:news_item>
        <ht:news_item_title>Dodgers force Game 7</ht:news_item_title>
        <ht:news_item_snippet>A walk-off in the ninth sends the series the distance.</ht:news_item_snippet>
        <ht:news_item_url>https://example.com/dodgers-game-7</ht:news_item_url>
        <ht:news_item_source>Example Sports</ht:news_item_source>
      </ht:news_item>
      <ht:news_item>
        <ht:news_item_title>How to watch Game 7</ht:news_item_title>
        <ht:news_item_snippet>Start time and TV channel.</ht:news_item_snippet>
        <ht:news_item_url>https://example.com/watch-game-7</ht:news_item_url>
      </ht:news_item>
    </item>
    <item>
      <title>Solar eclipse</title>
      <ht:approx_traffic>500K+</ht:approx_traffic>
      <description>eclipse map</description>
      <link>https://trends.google.com/trends/trendingsearches/daily?geo=US#Solar%20eclipse</link>
      <pubDate>Mon, 19 Oct 2026 01:00:00 -0700</pubDate>
      <ht:news_item>
        <ht:news_item_title>Eclipse path revealed</ht:news_item_title>
        <ht:news_item_snippet>Where to see totality.</ht:news_item_snippet>
        <ht:news_item_url>https://example.com/eclipse</ht:news_item_url>
      </ht:news_item>
    </item>
  </channel>
</rss>
"""

# 2026-10-19 12:00 UTC is 05:00 at -0700
FIXED_NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class StubFetcher:
    """Fetcher returning queued results; exceptions in the queue are raised."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def queue(self, *results):
        self.results.extend(results)

    async def fetch(self):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


class Clock:
    """Controllable clock for pipeline tests."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_record(title, traffic="100K+", pub_date="Mon, 19 Oct 2026 02:00:00 -0700", news=None):
    return {
        "title": title,
        "description": f"{title} description",
        "link": f"https://example.com/{title}",
        "pub_date": pub_date,
        "traffic": traffic,
        "picture": None,
        "news_item": news,
    }


@pytest.fixture
def sample_trends_xml():
    return SAMPLE_TRENDS_XML


@pytest.fixture
def clock():
    return Clock()
