"""Runtime dependency checks for CLI commands."""

from __future__ import annotations

import importlib.util
import shlex
import shutil
from typing import TYPE_CHECKING

from rasterpages.exceptions import DependencyError

if TYPE_CHECKING:
    from rasterpages.settings import Settings


def _is_module_available(module_name: str) -> bool:
    """Check whether a module can be imported.

    Args:
        module_name (str): Python module name.

    Returns:
        bool: True if import spec exists.
    """
    return importlib.util.find_spec(module_name) is not None


def _collect_missing_dependencies(modules_by_package: dict[str, str]) -> list[str]:
    """Collect missing packages for a module mapping.

    Args:
        modules_by_package (Mapping[str, str]): Mapping of package name -> import module.

    Returns:
        list[str]: Missing package names.
    """
    return [package for package, module in modules_by_package.items() if not _is_module_available(module)]


def ensure_cli_dependencies_for_extract(*, needs_page_count: bool = True) -> None:
    """Validate required Python dependencies for `rasterpages extract`.

    Args:
        needs_page_count (bool): Whether the run will probe page counts.

    Raises:
        DependencyError: If one or more required modules are missing.
    """
    modules = {"structlog": "structlog", "pydantic-settings": "pydantic_settings"}
    if needs_page_count:
        modules["pymupdf"] = "fitz"

    missing = _collect_missing_dependencies(modules)
    if missing:
        raise DependencyError(missing_package=missing, message="extract")


def resolve_engine_binary(settings: Settings) -> str:
    """Locate the rasterization engine executable on PATH.

    Args:
        settings (Settings): Runtime settings naming the engine binary.

    Raises:
        DependencyError: If the executable cannot be found.

    Returns:
        str: Absolute path of the engine executable.
    """
    parts = shlex.split(settings.engine_binary)
    program = parts[0] if parts else "gm"
    resolved = shutil.which(program)
    if resolved is None:
        raise DependencyError(missing_package=[program], message="extract")
    return resolved
