"""
Pydantic models for enriched trend data.

Field names are snake_case in Python and camelCase on the wire
(``hours_since_trending`` is served as ``hoursSinceTrending``).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class NewsItem(CamelModel):
    """News article embedded in a trending search."""
    title: str = ""
    snippet: str = ""
    url: Optional[str] = None
    source: Optional[str] = None
    picture: Optional[str] = None


class TrendMetrics(CamelModel):
    """Derived metrics for a trending search."""
    traffic_number: float = Field(0.0, description="Parsed approximate traffic")
    hours_since_trending: Optional[int] = Field(None, description="Hours since publication, null if unknown")
    trend_velocity: float = Field(0.0, description="Traffic change per hour from the two latest samples")


class TrendItem(CamelModel):
    """A single enriched trending search."""
    title: str
    description: str = ""
    link: Optional[str] = None
    pub_date: Optional[str] = None
    traffic: str = "N/A"
    picture: Optional[str] = None
    news_items: List[NewsItem] = Field(default_factory=list)
    metrics: TrendMetrics = Field(default_factory=TrendMetrics)
    timestamp: datetime


class TrendMetricsView(CamelModel):
    """Metrics projection served by the metrics endpoint."""
    title: str
    traffic: str
    metrics: TrendMetrics

    @classmethod
    def from_item(cls, item: TrendItem) -> "TrendMetricsView":
        return cls(title=item.title, traffic=item.traffic, metrics=item.metrics)


class Snapshot(CamelModel):
    """Point-in-time capture of every enriched item in one fetch cycle."""
    last_updated: datetime
    total_items: int
    items: List[TrendItem] = Field(default_factory=list)

    @classmethod
    def build(cls, items: List[TrendItem], last_updated: datetime) -> "Snapshot":
        return cls(last_updated=last_updated, total_items=len(items), items=items)

    def metrics_view(self) -> List[TrendMetricsView]:
        return [TrendMetricsView.from_item(item) for item in self.items]
