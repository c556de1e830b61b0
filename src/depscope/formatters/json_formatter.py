"""JSON formatter for depscope."""

import json

from ..report.aggregator import ProjectReport
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render the project report as JSON."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def render(self, report: ProjectReport) -> None:
        print(self.format(report))

    def format(self, report: ProjectReport) -> str:
        return json.dumps(report.to_dict(), indent=self.indent)
