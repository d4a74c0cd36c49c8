"""Core domain model exports."""

from rasterpages.typing.models.extraction import (
    DEFAULT_DENSITY,
    DEFAULT_FORMAT,
    DocumentSummary,
    ExtractionRequest,
    ExtractionSummary,
    RenderJob,
)
from rasterpages.typing.models.layout import OutputLayout
from rasterpages.typing.models.process import ProcessResult
from rasterpages.typing.models.size import ORIGINAL_SIZE, SizeSpec

__all__ = [
    "DEFAULT_DENSITY",
    "DEFAULT_FORMAT",
    "ORIGINAL_SIZE",
    "DocumentSummary",
    "ExtractionRequest",
    "ExtractionSummary",
    "OutputLayout",
    "ProcessResult",
    "RenderJob",
    "SizeSpec",
]
