"""GraphicsMagick command construction."""

from __future__ import annotations

import re
import shlex
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from rasterpages.settings import Settings
    from rasterpages.typing.models import SizeSpec

UNSHARP_AFTER_DOWNSAMPLE = "0x0.5+0.75"

_JPEG_FORMAT = re.compile(r"jpe?g")
_PNG_FORMAT = re.compile(r"png")


def quality_for(image_format: str) -> str | None:
    """Return the `-quality` value suited to an output format.

    Args:
        image_format (str): Output format identifier.

    Returns:
        str | None: `85` for JPEG family, `100` for PNG family, else None.
    """
    normalized = image_format.lower()
    if _JPEG_FORMAT.search(normalized):
        return "85"
    if _PNG_FORMAT.search(normalized):
        return "100"
    return None


class EngineCommandBuilder:
    """Build argument vectors for the rasterization engine.

    Every command is returned as a list of arguments, never as a shell string,
    so paths with spaces or shell metacharacters need no escaping.
    """

    def __init__(
        self,
        *,
        binary: str = "gm",
        memory_limit: str = "256MiB",
        map_limit: str = "512MiB",
    ) -> None:
        self.binary = shlex.split(binary) if binary.strip() else ["gm"]
        self.memory_limit = memory_limit
        self.map_limit = map_limit

    @classmethod
    def from_settings(cls, settings: Settings) -> EngineCommandBuilder:
        """Build a command builder configured from settings.

        Args:
            settings (Settings): Runtime settings.

        Returns:
            EngineCommandBuilder: Configured builder.
        """
        return cls(binary=settings.engine_binary, memory_limit=settings.memory_limit, map_limit=settings.map_limit)

    def _memory_args(self) -> list[str]:
        return ["-limit", "memory", self.memory_limit, "-limit", "map", self.map_limit]

    def _common_args(self, *, density: str, size: SizeSpec | None, image_format: str) -> list[str]:
        args = [*self._memory_args(), "-density", density]
        if size is not None and size.resize_argument is not None:
            args += ["-resize", size.resize_argument]
        quality = quality_for(image_format)
        if quality is not None:
            args += ["-quality", quality]
        return args

    def convert_page(
        self,
        *,
        document: Path,
        page: int,
        output_file: Path,
        density: str,
        size: SizeSpec | None,
        image_format: str,
    ) -> list[str]:
        """Build the command rendering one page of a document.

        Args:
            document (Path): Source document.
            page (int): 1-based page number.
            output_file (Path): Destination image.
            density (str): Rendering density in DPI.
            size (SizeSpec | None): Optional resize geometry.
            image_format (str): Output format, drives the quality argument.

        Raises:
            ValueError: If the page number is not positive.

        Returns:
            list[str]: Argument vector for `gm convert`.
        """
        if page < 1:
            message = f"Page numbers start at 1, got {page}"
            raise ValueError(message)
        return [
            *self.binary,
            "convert",
            "+adjoin",
            "-define",
            "pdf:use-cropbox=true",
            *self._common_args(density=density, size=size, image_format=image_format),
            f"{document}[{page - 1}]",
            str(output_file),
        ]

    def mogrify_files(
        self,
        *,
        files: Sequence[Path],
        density: str,
        size: SizeSpec,
        image_format: str,
    ) -> list[str]:
        """Build the command downsampling already rendered images in place.

        Args:
            files (Sequence[Path]): Images to rewrite, all in one directory.
            density (str): Rendering density in DPI.
            size (SizeSpec): Target resize geometry.
            image_format (str): Output format, drives the quality argument.

        Raises:
            ValueError: If no file is given.

        Returns:
            list[str]: Argument vector for `gm mogrify`.
        """
        if not files:
            message = "mogrify needs at least one file"
            raise ValueError(message)
        return [
            *self.binary,
            "mogrify",
            *self._common_args(density=density, size=size, image_format=image_format),
            "-unsharp",
            UNSHARP_AFTER_DOWNSAMPLE,
            *(str(path) for path in files),
        ]
