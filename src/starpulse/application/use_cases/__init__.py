from .day_ranking import DayAggregator, score_document
from .enrichment import EnrichmentEngine
from .popular import PopularRepositoriesUseCase
from .window_ranking import (
    WindowAggregator,
    iso_week_dates,
    month_dates,
    rank_totals,
    rolling_dates,
)

__all__ = [
    "DayAggregator",
    "EnrichmentEngine",
    "PopularRepositoriesUseCase",
    "WindowAggregator",
    "iso_week_dates",
    "month_dates",
    "rank_totals",
    "rolling_dates",
    "score_document",
]
