"""Output layout model."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from rasterpages.typing.models.size import SizeSpec


class OutputLayout(BaseModel):
    """Mapping from size label to output directory."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    output_root: Path
    directories: dict[str, Path]

    @property
    def is_shared(self) -> bool:
        """Return whether every size writes straight into the output root."""
        return len(self.directories) == 1

    def directory_for(self, size: SizeSpec) -> Path:
        """Return the output directory planned for a size.

        Args:
            size (SizeSpec): Requested size.

        Raises:
            KeyError: If the size was not part of the planned request.

        Returns:
            Path: Output directory.
        """
        return self.directories[size.label]
