from .schema import StatisticsReport
from .service import StatisticsService, build_report

__all__ = ["StatisticsReport", "StatisticsService", "build_report"]
