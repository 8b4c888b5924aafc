"""Base formatter interface for Ricci Analyzer output rendering."""

from abc import ABC, abstractmethod

from ..models import AnalysisReport


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def format(self, report: AnalysisReport) -> str:
        """Return formatted string representation of the report."""

    def render(self, report: AnalysisReport) -> None:
        """Print the formatted report to stdout."""
        print(self.format(report))
