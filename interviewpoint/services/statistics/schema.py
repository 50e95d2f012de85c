from __future__ import annotations

from typing import List, Optional

from interviewpoint.services.common import CamelModel


class LeaderboardEntry(CamelModel):
    result_id: str
    name: str
    score: float
    raw_score: float
    max_score: float
    date: str


class HistogramBin(CamelModel):
    range: str
    count: int
    min: int
    max: int


class DistributionPoint(CamelModel):
    category: str
    score: float
    candidate: str


class HeatmapCell(CamelModel):
    category: str
    value: Optional[float] = None


class HeatmapRow(CamelModel):
    candidate: str
    scores: List[HeatmapCell]


class Heatmap(CamelModel):
    categories: List[str]
    rows: List[HeatmapRow]


class StatisticsReport(CamelModel):
    run_id: Optional[str] = None
    count: int
    mean_score: Optional[float] = None
    leaderboard: List[LeaderboardEntry]
    histogram: List[HistogramBin]
    distribution: List[DistributionPoint]
    heatmap: Heatmap
