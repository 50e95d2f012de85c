from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from interviewpoint.services.interviews.schema import InterviewResult
from interviewpoint.services.interviews.service import ResultsService
from interviewpoint.services.scoring import category_percentage, percentage, rollup_by_category_name

from .schema import (
    DistributionPoint,
    Heatmap,
    HeatmapCell,
    HeatmapRow,
    HistogramBin,
    LeaderboardEntry,
    StatisticsReport,
)

HISTOGRAM_EDGES = [0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100]


def result_percentage(result: InterviewResult) -> float:
    return percentage(result.total_score, result.max_possible_score)


def leaderboard(results: Sequence[InterviewResult]) -> List[LeaderboardEntry]:
    entries = [
        LeaderboardEntry(
            result_id=r.id,
            name=r.candidate_name,
            score=result_percentage(r),
            raw_score=r.total_score,
            max_score=r.max_possible_score,
            date=r.date[:10],
        )
        for r in results
    ]
    return sorted(entries, key=lambda e: e.score, reverse=True)


def histogram(results: Sequence[InterviewResult]) -> List[HistogramBin]:
    bins = [
        HistogramBin(range=f"{lo}-{hi}%", count=0, min=lo, max=hi)
        for lo, hi in zip(HISTOGRAM_EDGES, HISTOGRAM_EDGES[1:])
    ]
    for result in results:
        index = min(max(int(result_percentage(result) // 10), 0), len(bins) - 1)
        bins[index].count += 1
    return bins


def distribution(results: Sequence[InterviewResult]) -> List[DistributionPoint]:
    points: List[DistributionPoint] = []
    for result in results:
        totals = rollup_by_category_name(result.categories, result.questions, result.answer_scores())
        for name, (total, maximum) in totals.items():
            if maximum > 0:
                points.append(
                    DistributionPoint(category=name, score=percentage(total, maximum), candidate=result.candidate_name)
                )
    return points


def heatmap(results: Sequence[InterviewResult]) -> Heatmap:
    names = sorted({c.name for r in results for c in r.categories})
    rows: List[HeatmapRow] = []
    for result in results:
        answers = result.answer_scores()
        by_name: Dict[str, float] = {
            c.name: category_percentage(c.id, result.questions, answers) for c in result.categories
        }
        rows.append(
            HeatmapRow(
                candidate=result.candidate_name,
                scores=[HeatmapCell(category=name, value=by_name.get(name)) for name in names],
            )
        )
    return Heatmap(categories=names, rows=rows)


def build_report(results: Sequence[InterviewResult], run_id: Optional[str] = None) -> StatisticsReport:
    mean = sum(result_percentage(r) for r in results) / len(results) if results else None
    return StatisticsReport(
        run_id=run_id,
        count=len(results),
        mean_score=mean,
        leaderboard=leaderboard(results),
        histogram=histogram(results),
        distribution=distribution(results),
        heatmap=heatmap(results),
    )


class StatisticsService:
    """Aggregate views over saved results, globally or for one run."""

    def __init__(self, results: ResultsService) -> None:
        self._results = results

    def report(self, run_id: Optional[str] = None) -> StatisticsReport:
        return build_report(self._results.list(run_id=run_id), run_id=run_id)


__all__ = [
    "StatisticsService",
    "build_report",
    "distribution",
    "heatmap",
    "histogram",
    "leaderboard",
]
