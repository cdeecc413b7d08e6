"""Normalization of raw trend records into model fields."""

import html
import re
from typing import Any, Dict, List, Optional, Union

from bs4 import BeautifulSoup

from trendfeed.core.logging import get_logger
from trendfeed.core.models import NewsItem

logger = get_logger(__name__)

WHITESPACE = re.compile(r'\s+')

RawNews = Union[None, Dict[str, Any], List[Dict[str, Any]]]


def clean_text(text: Optional[str]) -> str:
    """Strip markup and entities and collapse whitespace."""
    if not text:
        return ""

    text = html.unescape(str(text))
    if '<' in text and '>' in text:
        text = BeautifulSoup(text, "html.parser").get_text(" ")

    return WHITESPACE.sub(' ', text).strip()


def normalize_news_items(raw: RawNews) -> List[NewsItem]:
    """
    Normalize embedded news into a list of NewsItem.

    The feed may carry no news, a single news mapping or a list of them.
    Entries with neither a title nor a snippet are dropped.
    """
    if raw is None:
        return []
    if isinstance(raw, dict):
        raw = [raw]

    items = []
    for news in raw:
        if not isinstance(news, dict):
            logger.debug(f"Skipping malformed news entry: {news!r}")
            continue

        title = clean_text(news.get("title"))
        snippet = clean_text(news.get("snippet"))
        if not title and not snippet:
            continue

        items.append(NewsItem(
            title=title,
            snippet=snippet,
            url=news.get("url") or None,
            source=news.get("source") or None,
            picture=news.get("picture") or None,
        ))

    return items
