"""Trending searches RSS fetching with timeout and retry handling."""

import warnings
from typing import Any, Dict, List, Optional

import feedparser
import httpx
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from trendfeed.core.logging import get_logger

logger = get_logger(__name__)

USER_AGENT = "TrendFeed/0.1 (trending searches reader)"

RETRYABLE_STATUS = (429, 500, 502, 503, 504)
NEWS_FIELDS = ("title", "snippet", "url", "source", "picture")


class FeedFetchError(Exception):
    """Raised when the upstream feed cannot be fetched or parsed."""


class RetryableStatusError(Exception):
    """Upstream answered with a status worth retrying."""

    def __init__(self, status_code: int):
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


def parse_trends_feed(content: str) -> List[Dict[str, Any]]:
    """
    Parse a trending searches RSS document into raw trend records.

    Standard fields come from feedparser. feedparser flattens repeated
    ``ht:news_item`` blocks into the last one, so the blocks are also read
    per ``<item>`` with BeautifulSoup; when both views disagree on the item
    count the flattened single block is kept.
    """
    feed = feedparser.parse(content)

    if feed.bozo and not feed.entries:
        raise FeedFetchError(f"Feed parsing error: {feed.get('bozo_exception')}")
    if feed.bozo:
        logger.warning(f"Feed parsing warning: {feed.get('bozo_exception')}")

    news_blocks = _extract_news_blocks(content)
    if len(news_blocks) != len(feed.entries):
        logger.debug("News block count differs from entry count, using flattened news items")
        news_blocks = None

    records = []
    for index, entry in enumerate(feed.entries):
        news = news_blocks[index] if news_blocks is not None else _flattened_news(entry)
        records.append({
            "title": entry.get("title", ""),
            "description": entry.get("summary", ""),
            "link": entry.get("link"),
            "pub_date": entry.get("published"),
            "traffic": entry.get("ht_approx_traffic"),
            "picture": entry.get("ht_picture"),
            "news_item": news,
        })

    return records


def _extract_news_blocks(content: str) -> List[List[Dict[str, str]]]:
    """News item blocks for every <item>, in document order."""
    # RSS goes through html.parser so ht: prefixed tag names are kept verbatim.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", XMLParsedAsHTMLWarning)
        soup = BeautifulSoup(content, "html.parser")
    blocks = []
    for item in soup.find_all("item"):
        news = []
        for block in item.find_all("ht:news_item"):
            fields = {}
            for name in NEWS_FIELDS:
                tag = block.find(f"ht:news_item_{name}")
                if tag is not None:
                    fields[name] = tag.get_text(strip=True)
            news.append(fields)
        blocks.append(news)
    return blocks


def _flattened_news(entry: Any) -> Optional[Dict[str, str]]:
    """Single news item as left on the entry by feedparser."""
    fields = {
        name: entry.get(f"ht_news_item_{name}")
        for name in NEWS_FIELDS
        if entry.get(f"ht_news_item_{name}")
    }
    return fields or None


class TrendsFetcher:
    """Fetches the trending searches feed for one region."""

    def __init__(
        self,
        url: str,
        geo: Optional[str] = "US",
        timeout: float = 10.0,
        max_attempts: int = 3,
        client: Optional[httpx.AsyncClient] = None,
        retry_wait=None,
    ):
        self.url = url
        self.geo = geo
        self.max_attempts = max_attempts
        self.retry_wait = retry_wait or wait_exponential(multiplier=0.5, min=0.5, max=4.0)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    @property
    def params(self) -> Dict[str, str]:
        return {"geo": self.geo} if self.geo else {}

    async def _get(self) -> httpx.Response:
        """Single GET, raising on statuses worth retrying."""
        logger.debug(f"Fetching {self.url} params={self.params}")
        response = await self.client.get(self.url, params=self.params)
        if response.status_code in RETRYABLE_STATUS:
            logger.warning(f"Retryable HTTP {response.status_code} for {self.url}")
            raise RetryableStatusError(response.status_code)
        return response

    async def _get_with_retry(self) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception_type((RetryableStatusError, httpx.TimeoutException, httpx.NetworkError)),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._get()

    async def fetch(self) -> List[Dict[str, Any]]:
        """
        Fetch and parse the feed.

        Returns raw trend records in feed order. Raises FeedFetchError on
        network, timeout, HTTP status or parse failures.
        """
        logger.info(f"Fetching trends feed: {self.url} (geo={self.geo})")

        try:
            response = await self._get_with_retry()
        except RetryableStatusError as e:
            logger.error(f"Giving up on {self.url} after {self.max_attempts} attempts: {e}")
            raise FeedFetchError(str(e)) from e
        except httpx.HTTPError as e:
            logger.error(f"Request error fetching {self.url}: {type(e).__name__}: {e}")
            raise FeedFetchError(f"Request error: {e}") from e

        if response.status_code != 200:
            logger.error(f"HTTP error {response.status_code} for {self.url}")
            raise FeedFetchError(f"HTTP {response.status_code}")

        content = response.text
        if not content.strip():
            logger.error(f"Empty feed content from {self.url}")
            raise FeedFetchError("Empty feed content")

        records = parse_trends_feed(content)
        logger.info(f"Parsed {len(records)} trends from {self.url}")
        return records
