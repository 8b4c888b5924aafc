"""YAML formatter for Ricci Analyzer."""

import yaml

from ..models import AnalysisReport
from .base import BaseFormatter


class YamlFormatter(BaseFormatter):
    """Render the report as YAML, keys in report order."""

    def format(self, report: AnalysisReport) -> str:
        return yaml.safe_dump(
            report.to_dict(),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
