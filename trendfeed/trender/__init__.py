"""Trending searches processing package.

This package contains modules for:
- Traffic parsing (traffic.py)
- Per-title history and velocity (history.py)
- Fetch/enrich cycle (pipeline.py)
- Snapshot cache and periodic refresh (cache.py)
- HTTP application (app.py)
"""

from .traffic import parse_traffic
from .history import HistorySample, HistoryStore
from .pipeline import TrendPipeline, enrich_record
from .cache import TrendCache

__all__ = [
    'parse_traffic',
    'HistorySample',
    'HistoryStore',
    'TrendPipeline',
    'enrich_record',
    'TrendCache',
]
