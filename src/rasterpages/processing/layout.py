"""Output directory planning."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rasterpages.typing.models import OutputLayout

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from rasterpages.typing.models import SizeSpec


def plan_layout(output_root: Path, sizes: Sequence[SizeSpec]) -> OutputLayout:
    """Decide the output directory of every requested size.

    A single size writes directly into `output_root`; multiple sizes each get
    a subdirectory named after their label.

    Args:
        output_root (Path): Root output directory.
        sizes (Sequence[SizeSpec]): Effective sizes, in request order.

    Raises:
        ValueError: If no size is given.

    Returns:
        OutputLayout: Size label to directory mapping.
    """
    if not sizes:
        message = "At least one size is required to plan an output layout"
        raise ValueError(message)

    root = output_root.expanduser().resolve()
    if len(sizes) == 1:
        return OutputLayout(output_root=root, directories={sizes[0].label: root})
    return OutputLayout(output_root=root, directories={size.label: root / size.label for size in sizes})


def ensure_directory(path: Path) -> Path:
    """Create a directory and its parents if missing.

    Args:
        path (Path): Directory to create.

    Returns:
        Path: The same directory.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path
