"""Document page-count probe."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

try:
    import fitz
except Exception:  # pragma: no cover - optional dependency at runtime
    fitz: Any
    fitz = None

from rasterpages.exceptions import DependencyError, PageCountError
from rasterpages.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

logger = get_logger(__name__)


def count_pages(document: Path) -> int:
    """Return the number of pages of a document using PyMuPDF.

    Args:
        document (Path): Document to probe.

    Raises:
        DependencyError: If PyMuPDF is not installed.
        PageCountError: If the document cannot be opened.

    Returns:
        int: Total number of pages.
    """
    if fitz is None:
        raise DependencyError(missing_package=["pymupdf"], message="page count")

    try:
        with fitz.open(document) as doc:
            total = doc.page_count
    except Exception as exc:
        raise PageCountError(document=str(document), exc=exc) from exc

    logger.debug("Counted pages", extra={"input_path": str(document), "pages": total})
    return total
