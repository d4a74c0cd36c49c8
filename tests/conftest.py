"""Pytest marker auto-assignment by folder and shared engine fakes."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from rasterpages import logger
from rasterpages.exceptions import ExtractionFailedError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = Path(config.rootpath) / "tests" / marker
    target_dir = target_dir.resolve()

    for item in items:
        try:
            path = Path(str(item.fspath)).resolve()
        except Exception:
            logger.warning(
                f"Could not resolve path for test item {item.name!s}; skipping {marker!s} marker assignment",
            )
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    _mark_tests_by_directory(config, items, "unit")
    _mark_tests_by_directory(config, items, "integration")
    _mark_tests_by_directory(config, items, "end2end")


class RecordingRunner:
    """Command runner double that records calls and emulates the engine's file effects."""

    def __init__(self, fail_on_call: int | None = None) -> None:
        self.calls: list[tuple[list[str], dict[str, str]]] = []
        self.scratch_dirs: list[Path] = []
        self._fail_on_call = fail_on_call

    def run(
        self,
        command: Sequence[str],
        env: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
    ) -> str:
        _ = timeout_seconds
        argv = list(command)
        environment = dict(env or {})
        self.calls.append((argv, environment))
        if "MAGICK_TMPDIR" in environment:
            scratch = Path(environment["MAGICK_TMPDIR"])
            assert scratch.is_dir()
            self.scratch_dirs.append(scratch)

        if self._fail_on_call is not None and len(self.calls) == self._fail_on_call:
            raise ExtractionFailedError(output="engine exploded", exit_code=1, command=tuple(argv))

        if argv[1] == "convert":
            Path(argv[-1]).write_bytes(f"render {argv[-2]}".encode())
        elif argv[1] == "mogrify":
            for target in argv[argv.index("-unsharp") + 2 :]:
                path = Path(target)
                path.write_bytes(path.read_bytes() + b" downsampled")
        return ""

    def commands(self, verb: str) -> list[list[str]]:
        return [argv for argv, _ in self.calls if argv[1] == verb]


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def runner_factory() -> type[RecordingRunner]:
    return RecordingRunner
