"""Subprocess result models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from rasterpages.typing.enums import ProcessOutcome


class ProcessResult(BaseModel):
    """Typed result of one external command invocation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    command: tuple[str, ...]
    outcome: ProcessOutcome
    exit_code: int | None = None
    output: str = ""
    duration_seconds: float = Field(default=0.0, ge=0.0)
    timeout_seconds: float | None = None

    @property
    def succeeded(self) -> bool:
        """Return whether the command exited cleanly."""
        return self.outcome == ProcessOutcome.SUCCESS
