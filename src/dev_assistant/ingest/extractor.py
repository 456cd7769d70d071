"""Format-specific text extractors for attachment files."""

from __future__ import annotations

import csv
from abc import ABC, abstractmethod
from itertools import islice
from pathlib import Path

from pypdf import PdfReader

UNSUPPORTED_MARKER = "[Unsupported file type - only PDF, CSV, TXT, MD processed]"
CSV_MAX_ROWS = 50


class Extractor(ABC):
    """Base extractor interface used by the attachment processor."""

    extensions: tuple[str, ...] = ()

    @abstractmethod
    def extract(self, path: Path) -> str:
        """Return the plain text content of a file."""


class TextExtractor(Extractor):
    """Passthrough for plain text and markdown."""

    extensions = (".txt", ".md")

    def extract(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")


class CsvExtractor(Extractor):
    """Renders at most `max_rows` CSV rows as comma-joined lines."""

    extensions = (".csv",)

    def __init__(self, max_rows: int = CSV_MAX_ROWS) -> None:
        self.max_rows = max_rows

    def extract(self, path: Path) -> str:
        with path.open(encoding="utf-8", newline="") as handle:
            rows = islice(csv.reader(handle), self.max_rows)
            return "\n".join(", ".join(row) for row in rows)


class PdfExtractor(Extractor):
    extensions = (".pdf",)

    def extract(self, path: Path) -> str:
        reader = PdfReader(path)
        return "\n".join(page.extract_text() or "" for page in reader.pages)


class ExtractorRegistry:
    """Maps file extension to extractor implementation."""

    def __init__(self, extractors: list[Extractor] | None = None) -> None:
        self._extractors: dict[str, Extractor] = {}
        for extractor in extractors or [PdfExtractor(), CsvExtractor(), TextExtractor()]:
            self.register(extractor)

    def register(self, extractor: Extractor) -> None:
        for extension in extractor.extensions:
            self._extractors[extension.lower()] = extractor

    def supports(self, name: str) -> bool:
        return Path(name).suffix.lower() in self._extractors

    def extract(self, path: Path, *, name: str | None = None) -> str:
        """Extract text, dispatching on the suffix of `name` (or `path`).

        Unknown suffixes yield `UNSUPPORTED_MARKER` rather than an error.
        """
        suffix = Path(name or path.name).suffix.lower()
        extractor = self._extractors.get(suffix)
        if extractor is None:
            return UNSUPPORTED_MARKER
        return extractor.extract(path)
