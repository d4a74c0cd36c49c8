"""Extraction request, job and summary models."""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rasterpages.typing.enums import RenderSource
from rasterpages.typing.models.size import SizeSpec

DEFAULT_FORMAT = "png"
DEFAULT_DENSITY = "150"

_DENSITY = re.compile(r"^\d+(?:\.\d+)?(?:x\d+(?:\.\d+)?)?$")
_FORMAT = re.compile(r"^[a-z0-9]+$")


class ExtractionRequest(BaseModel):
    """Declarative description of one rasterization run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    documents: list[Path] = Field(default_factory=list)
    output_root: Path = Path()
    page_spec: str | None = None
    density: str = DEFAULT_DENSITY
    formats: list[str] = Field(default_factory=lambda: [DEFAULT_FORMAT], min_length=1)
    sizes: list[SizeSpec] = Field(default_factory=list)
    rolling: bool = False

    @field_validator("page_spec")
    @classmethod
    def validate_page_spec(cls, value: str | None) -> str | None:
        """Treat a blank page spec as absent.

        Args:
            value (str | None): Raw page spec.

        Returns:
            str | None: Stripped page spec, or None.
        """
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("density")
    @classmethod
    def validate_density(cls, value: str) -> str:
        """Validate the rendering density.

        Args:
            value (str): Raw density, e.g. `150` or `150x300`.

        Raises:
            ValueError: If the density is not a positive number.

        Returns:
            str: The stripped density.
        """
        candidate = str(value).strip()
        if not _DENSITY.fullmatch(candidate) or float(candidate.split("x")[0]) <= 0:
            message = f"Density must be a positive number such as '150', got '{value}'"
            raise ValueError(message)
        return candidate

    @field_validator("formats", mode="before")
    @classmethod
    def normalize_formats(cls, value: object) -> object:
        """Normalize formats to lower-case identifiers, deduplicated in order.

        Args:
            value (object): Raw formats, a single string or a sequence.

        Raises:
            ValueError: If a format is not a plain alphanumeric identifier.

        Returns:
            object: Normalized list of formats.
        """
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return value

        formats: list[str] = []
        for raw in value:
            candidate = str(raw).strip().lower().removeprefix(".")
            if not _FORMAT.fullmatch(candidate):
                message = f"Unsupported image format identifier '{raw}'"
                raise ValueError(message)
            if candidate not in formats:
                formats.append(candidate)
        return formats

    @field_validator("sizes", mode="before")
    @classmethod
    def coerce_sizes(cls, value: object) -> object:
        """Accept size labels as plain strings.

        Args:
            value (object): Raw sizes, a single label or a sequence.

        Returns:
            object: Sequence of `SizeSpec` payloads.
        """
        if isinstance(value, (str, SizeSpec)):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return value
        return [{"label": item} if isinstance(item, str) else item for item in value]

    @field_validator("sizes")
    @classmethod
    def reject_duplicate_sizes(cls, value: list[SizeSpec]) -> list[SizeSpec]:
        """Reject repeated sizes, which would share one output directory.

        Args:
            value (list[SizeSpec]): Parsed sizes.

        Raises:
            ValueError: If the same label appears twice.

        Returns:
            list[SizeSpec]: The sizes, unchanged.
        """
        labels = [size.label for size in value]
        duplicates = sorted({label for label in labels if labels.count(label) > 1})
        if duplicates:
            message = f"Duplicate sizes requested: {', '.join(duplicates)}"
            raise ValueError(message)
        return value

    @property
    def effective_sizes(self) -> list[SizeSpec]:
        """Return requested sizes, or the single implicit `original` size."""
        return list(self.sizes) or [SizeSpec.original()]


class RenderJob(BaseModel):
    """One (document, size, format) unit of work."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    document: Path
    size: SizeSpec
    format: str
    pages: list[int]
    output_dir: Path
    source: RenderSource = RenderSource.ORIGINAL_DOCUMENT
    source_dir: Path | None = None
    source_size: SizeSpec | None = None

    @property
    def resize(self) -> SizeSpec:
        """Return the geometry applied to this job's source images."""
        if self.source_size is None:
            return self.size
        return self.size.rescaled_from(self.source_size)

    @property
    def basename(self) -> str:
        """Return the document file name without its extension."""
        return self.document.stem

    def file_name(self, page: int) -> str:
        """Return the output file name for a page."""
        return f"{self.basename}_{page}.{self.format}"

    def output_file(self, page: int) -> Path:
        """Return the output path for a page."""
        return self.output_dir / self.file_name(page)


class DocumentSummary(BaseModel):
    """Files produced for one document."""

    model_config = ConfigDict(extra="forbid")

    document: Path
    pages: list[int]
    files: list[Path] = Field(default_factory=list)
    invocations: int = 0


class ExtractionSummary(BaseModel):
    """Outcome of a full extraction run."""

    model_config = ConfigDict(extra="forbid")

    documents: list[DocumentSummary] = Field(default_factory=list)

    @property
    def invocations(self) -> int:
        """Return the number of engine invocations across documents."""
        return sum(document.invocations for document in self.documents)

    @property
    def files(self) -> list[Path]:
        """Return every written file, in production order."""
        return [path for document in self.documents for path in document.files]
