"""Typing-centric domain modules."""

from rasterpages.typing.enums import ProcessOutcome, RenderSource
from rasterpages.typing.models import (
    DocumentSummary,
    ExtractionRequest,
    ExtractionSummary,
    OutputLayout,
    ProcessResult,
    RenderJob,
    SizeSpec,
)
from rasterpages.typing.protocol import CommandRunner, PageCounter

__all__ = [
    "CommandRunner",
    "DocumentSummary",
    "ExtractionRequest",
    "ExtractionSummary",
    "OutputLayout",
    "PageCounter",
    "ProcessOutcome",
    "ProcessResult",
    "RenderJob",
    "RenderSource",
    "SizeSpec",
]
