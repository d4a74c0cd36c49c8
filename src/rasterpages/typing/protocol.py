"""Collaborator interfaces."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path


class PageCounter(Protocol):
    """Probe returning the number of pages of a document."""

    def __call__(self, document: Path) -> int:
        """Return the page count of a document.

        Args:
            document: Document path.

        Returns:
            int: Total number of pages (0 or more).
        """


class CommandRunner(Protocol):
    """Executes an external command under a hard timeout."""

    def run(
        self,
        command: Sequence[str],
        env: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
    ) -> str:
        """Run a command and return its sanitized output.

        Args:
            command: Argument vector.
            env: Extra environment variables.
            timeout_seconds: Optional deadline override.

        Returns:
            str: Sanitized combined output.
        """
