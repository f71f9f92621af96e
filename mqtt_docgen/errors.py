"""Error taxonomy for the documentation-to-schema generator."""

from __future__ import annotations

__all__ = [
    "GeneratorError",
    "ExtractionError",
    "ClassificationError",
    "MissingCompanionDocumentError",
    "ConfigError",
]


class GeneratorError(Exception):
    """Base generator exception.

    ``document`` and ``stage`` are filled in by the batch pipeline so the
    command line can report which document failed and where.
    """

    def __init__(self, message: str, *, document: str | None = None, stage: str | None = None):
        super().__init__(message)
        self.message = message
        self.document = document
        self.stage = stage

    def __str__(self) -> str:
        prefix = []
        if self.document:
            prefix.append(f"document={self.document}")
        if self.stage:
            prefix.append(f"stage={self.stage}")
        if prefix:
            return f"[{' '.join(prefix)}] {self.message}"
        return self.message


class ExtractionError(GeneratorError):
    """Raised when the configuration block is missing or cannot be decoded.

    ``raw_text`` holds the captured block (``None`` when no block exists).
    """

    def __init__(self, message: str, *, raw_text: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_text = raw_text


class ClassificationError(GeneratorError):
    """Raised when an attribute's type tag resolves to no structural kind."""

    def __init__(self, message: str, *, path: str = "", tag: object = None, **kwargs):
        super().__init__(message, **kwargs)
        self.path = path
        self.tag = tag


class MissingCompanionDocumentError(GeneratorError):
    """Companion description document is absent (non-fatal for callers)."""


class ConfigError(GeneratorError):
    """Invalid generator configuration."""
