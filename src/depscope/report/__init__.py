"""Project-level report aggregation."""

from .aggregator import ProjectReport, ReportAggregator, average_scores

__all__ = ["ProjectReport", "ReportAggregator", "average_scores"]
