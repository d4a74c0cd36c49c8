"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass, field


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class DependencyError(PackageError):
    """Raised when runtime dependencies are missing."""

    missing_package: list[str]
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing runtime dependencies for '{self.message}': {', '.join(self.missing_package)}"


@dataclass(frozen=True)
class InvalidPageSpecError(PackageError):
    """Raised when a page specification contains a malformed token."""

    spec: str | None
    token: str | None = None
    reason: str = "malformed page token"

    def __str__(self) -> str:
        """Return error message payload."""
        if self.token is None:
            return f"Invalid page spec {self.spec!r}: {self.reason}"
        return f"Invalid page spec {self.spec!r}: {self.reason} {self.token!r}"


@dataclass(frozen=True)
class ExtractionFailedError(PackageError):
    """Raised when the rasterization engine exits with a non-zero status."""

    output: str
    exit_code: int | None = None
    command: tuple[str, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        """Return error message payload."""
        program = self.command[0] if self.command else "command"
        status = "could not be started" if self.exit_code is None else f"exited with status {self.exit_code}"
        return f"{program} {status}: {self.output}" if self.output else f"{program} {status}"


@dataclass(frozen=True)
class ExtractionTimeoutError(PackageError):
    """Raised when the rasterization engine is killed at its deadline."""

    timeout_seconds: float
    output: str = ""
    command: tuple[str, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        """Return error message payload."""
        program = self.command[0] if self.command else "command"
        message = f"{program} killed after {self.timeout_seconds:g}s timeout"
        return f"{message}: {self.output}" if self.output else message


@dataclass(frozen=True)
class RollingOrderError(PackageError):
    """Raised when rolling sizes are not in descending resolution order."""

    previous: str
    current: str
    reason: str = "is larger than the preceding size"

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Rolling sizes must be given largest first: '{self.current}' {self.reason} '{self.previous}'"


@dataclass(frozen=True)
class RollingSourceError(PackageError):
    """Raised when the previous size lacks files needed for a rolling downsample."""

    source_dir: str
    missing: list[str]

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Rolling source '{self.source_dir}' is incomplete, missing: {', '.join(self.missing)}"


@dataclass(frozen=True)
class PageCountError(PackageError):
    """Raised when the page count of a document cannot be determined."""

    document: str
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        message = f"Failed to count pages of '{self.document}'"
        return f"{message}: {self.exc}" if self.exc else message
