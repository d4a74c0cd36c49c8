from __future__ import annotations

import pytest

from rasterpages.dependencies import ensure_cli_dependencies_for_extract, resolve_engine_binary
from rasterpages.exceptions import DependencyError
from rasterpages.settings import Settings


def test_ensure_cli_dependencies_for_extract_succeeds(monkeypatch) -> None:
    monkeypatch.setattr("rasterpages.dependencies._is_module_available", lambda module_name: True)
    ensure_cli_dependencies_for_extract()


def test_ensure_cli_dependencies_for_extract_raises(monkeypatch) -> None:
    monkeypatch.setattr("rasterpages.dependencies._is_module_available", lambda module_name: False)
    with pytest.raises(DependencyError, match="pymupdf"):
        ensure_cli_dependencies_for_extract()


def test_page_count_dependency_is_skipped_for_explicit_pages(monkeypatch) -> None:
    monkeypatch.setattr("rasterpages.dependencies._is_module_available", lambda module_name: module_name != "fitz")
    ensure_cli_dependencies_for_extract(needs_page_count=False)


def test_resolve_engine_binary_uses_path_lookup(monkeypatch) -> None:
    seen: list[str] = []

    def _which(program: str) -> str:
        seen.append(program)
        return f"/usr/bin/{program}"

    monkeypatch.setattr("rasterpages.dependencies.shutil.which", _which)

    assert resolve_engine_binary(Settings(engine_binary="gm")) == "/usr/bin/gm"
    assert seen == ["gm"]


def test_resolve_engine_binary_raises_when_missing(monkeypatch) -> None:
    monkeypatch.setattr("rasterpages.dependencies.shutil.which", lambda program: None)
    with pytest.raises(DependencyError, match="Missing runtime dependencies for 'extract': gm"):
        resolve_engine_binary(Settings(engine_binary="gm"))
