"""Size specifier model."""

from __future__ import annotations

import re
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

ORIGINAL_SIZE = "original"

_GEOMETRY = re.compile(
    r"^(?P<width>\d+(?:\.\d+)?)?(?:x(?P<height>\d+(?:\.\d+)?)?)?(?P<percent>%)?(?P<flags>[!<>^@]*)$",
)


class _ScaleKey(NamedTuple):
    """Comparable view of a geometry: relative (percent) or absolute (pixels)."""

    relative: bool
    width: float | None
    height: float | None


def _compare_optional(left: float | None, right: float | None) -> int | None:
    if left is None or right is None:
        return None
    return (left > right) - (left < right)


def _format_dimension(value: float) -> str:
    return f"{value:.4f}".rstrip("0").rstrip(".")


class SizeSpec(BaseModel):
    """Target size: `original` or a GraphicsMagick resize geometry.

    The label doubles as the directory name for multi-size requests and never
    contains a path separator.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    label: str

    @field_validator("label")
    @classmethod
    def validate_label(cls, value: str) -> str:
        """Validate the size label against the supported geometry grammar.

        Args:
            value (str): Raw size label.

        Raises:
            ValueError: If the label is neither `original` nor a resize geometry.

        Returns:
            str: The stripped label.
        """
        candidate = value.strip()
        if candidate == ORIGINAL_SIZE:
            return candidate
        match = _GEOMETRY.fullmatch(candidate)
        dimensions = [] if match is None else [group for group in match.group("width", "height") if group]
        if not dimensions or any(float(dimension) <= 0 for dimension in dimensions):
            message = f"Unsupported size '{value}'. Expected 'original' or a geometry such as '300x', 'x200', '50%'"
            raise ValueError(message)
        return candidate

    @classmethod
    def original(cls) -> SizeSpec:
        """Return the implicit no-resize size."""
        return cls(label=ORIGINAL_SIZE)

    @property
    def is_original(self) -> bool:
        """Return whether this size keeps the rendered resolution."""
        return self.label == ORIGINAL_SIZE

    @property
    def resize_argument(self) -> str | None:
        """Return the `-resize` value, or None when no resize applies."""
        return None if self.is_original else self.label

    def _scale_key(self) -> _ScaleKey:
        if self.is_original:
            return _ScaleKey(relative=True, width=100.0, height=100.0)
        match = _GEOMETRY.fullmatch(self.label)
        if match is None:  # pragma: no cover - guarded by the validator
            message = f"Unsupported size '{self.label}'"
            raise ValueError(message)
        width = float(match.group("width")) if match.group("width") else None
        height = float(match.group("height")) if match.group("height") else None
        if match.group("percent"):
            # A single percentage scales both axes.
            return _ScaleKey(
                relative=True,
                width=width if width is not None else height,
                height=height if height is not None else width,
            )
        return _ScaleKey(relative=False, width=width, height=height)

    def compare(self, other: SizeSpec) -> int | None:
        """Compare output resolution against another size.

        `original` is treated as the full rendered resolution: larger than any
        pixel geometry and equal to `100%`.

        Args:
            other (SizeSpec): Size to compare with.

        Returns:
            int | None: 1 if this size is larger, -1 if smaller, 0 if equal,
            None when the two geometries cannot be ordered.
        """
        mine, theirs = self._scale_key(), other._scale_key()
        if mine.relative != theirs.relative:
            if self.is_original:
                return 1
            if other.is_original:
                return -1
            return None

        orders = {
            order
            for order in (
                _compare_optional(mine.width, theirs.width),
                _compare_optional(mine.height, theirs.height),
            )
            if order is not None
        }
        if len(orders) != 1:
            # Either nothing shared to compare, or the axes disagree.
            return None
        return orders.pop()

    @property
    def is_relative(self) -> bool:
        """Return whether this size is a percentage of the image it is applied to."""
        return not self.is_original and self._scale_key().relative

    def rescaled_from(self, previous: SizeSpec) -> SizeSpec:
        """Return the geometry that shrinks `previous` output down to this size.

        Percentages apply to the image being resized, so downsampling `50%`
        output to `25%` of the page takes `50%`. Other geometries are absolute
        and are returned unchanged.

        Args:
            previous (SizeSpec): Size the images were produced at.

        Returns:
            SizeSpec: Geometry to apply to the previous size's images.
        """
        if not (self.is_relative and previous.is_relative):
            return self
        mine, theirs = self._scale_key(), previous._scale_key()
        if None in (mine.width, mine.height, theirs.width, theirs.height):  # pragma: no cover - filled by _scale_key
            return self
        width = _format_dimension(mine.width / theirs.width * 100)
        height = _format_dimension(mine.height / theirs.height * 100)
        flags = _GEOMETRY.fullmatch(self.label).group("flags")
        geometry = width if width == height else f"{width}x{height}"
        return SizeSpec(label=f"{geometry}%{flags}")

    def __str__(self) -> str:
        """Return the literal size label."""
        return self.label
