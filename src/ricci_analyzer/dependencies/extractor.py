"""Dispatch manifests to their parser and turn parse failures into warnings."""

from pathlib import PurePosixPath
from typing import Optional

from ..exceptions import ManifestParseError
from ..logging_config import get_logger
from ..models import AnalysisWarning, WarningKind
from .parsers import ManifestParser, ManifestResult, get_default_parsers

logger = get_logger(__name__)


class DependencyExtractor:
    """Extracts declared dependencies from manifest files.

    Manifests are recognized by file name only. Parsing never raises: a
    manifest that fails to parse yields no records and a single
    ``manifest_parse_error`` warning.
    """

    def __init__(self, parsers: Optional[list[ManifestParser]] = None):
        self.parsers = parsers if parsers is not None else get_default_parsers()

    def parser_for(self, filename: str) -> Optional[ManifestParser]:
        for parser in self.parsers:
            if parser.matches(filename):
                return parser
        return None

    def is_manifest(self, filename: str) -> bool:
        return self.parser_for(PurePosixPath(filename).name) is not None

    def extract(self, relative_path: str, content: str) -> ManifestResult:
        """Parse one manifest.

        Args:
            relative_path: Manifest path relative to the analysis root
            content: Manifest text

        Returns:
            ManifestResult (empty when the file is not a manifest)
        """
        parser = self.parser_for(PurePosixPath(relative_path).name)
        if parser is None:
            return ManifestResult()

        try:
            result = parser.parse(relative_path, content)
        except ManifestParseError as e:
            logger.warning(f"Skipping manifest {relative_path}: {e.reason}")
            warning = AnalysisWarning(
                kind=WarningKind.MANIFEST_PARSE_ERROR,
                path=relative_path,
                message=f"Failed to parse manifest: {e.reason}",
            )
            return ManifestResult(warnings=(warning,))

        for warning in result.warnings:
            logger.warning(f"{warning.path}: {warning.message}")
        logger.debug(
            f"{relative_path}: {len(result.records)} {parser.ecosystem.value} dependencies"
        )
        return result
