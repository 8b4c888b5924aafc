"""JSON formatter for Ricci Analyzer."""

import json

from ..models import AnalysisReport
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render the report as JSON."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def format(self, report: AnalysisReport) -> str:
        return json.dumps(report.to_dict(), indent=self.indent, ensure_ascii=False)
