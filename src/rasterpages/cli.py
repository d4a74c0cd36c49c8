"""CLI entry point for RasterPages."""

from __future__ import annotations

import argparse
from pathlib import Path

from pydantic import ValidationError

from rasterpages import __version__, logger
from rasterpages.dependencies import ensure_cli_dependencies_for_extract, resolve_engine_binary
from rasterpages.exceptions import ExtractionTimeoutError, PackageError
from rasterpages.extractor import ImageExtractor
from rasterpages.logging import configure_logging
from rasterpages.processing.page_ranges import needs_page_count
from rasterpages.settings import Settings, get_settings
from rasterpages.typing.models import ExtractionRequest

EXIT_TIMEOUT = 124


def _positive_float(value: str) -> float:
    """Parse a strictly positive number of seconds.

    Args:
        value (str): CLI value.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive number.

    Returns:
        float: Parsed value.
    """
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a number of seconds, got '{value}'") from exc  # noqa: TRY003
    if parsed <= 0:
        raise argparse.ArgumentTypeError("--timeout must be positive")  # noqa: TRY003
    return parsed


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="rasterpages")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    extract_parser = subparsers.add_parser("extract", help="Rasterize document pages into images")
    extract_parser.add_argument("documents", nargs="+", type=Path, metavar="DOCUMENT")
    extract_parser.add_argument("--output", "-o", type=Path, default=Path(), dest="output_root")
    extract_parser.add_argument("--pages", "-p", default=None, dest="page_spec", help="e.g. 1-3,5,9-")
    extract_parser.add_argument("--density", "-d", default=None, help="rendering DPI")
    extract_parser.add_argument(
        "--format",
        "-f",
        action="append",
        default=None,
        dest="formats",
        help="output format, repeatable (default: png)",
    )
    extract_parser.add_argument(
        "--size",
        "-s",
        action="append",
        default=None,
        dest="sizes",
        help="resize geometry such as 700x or 50%%, repeatable",
    )
    extract_parser.add_argument(
        "--rolling",
        "-r",
        action="store_true",
        help="downsample each size from the previous one instead of re-rendering",
    )
    extract_parser.add_argument("--timeout", type=_positive_float, default=None, help="per-command timeout in seconds")

    return parser


def _build_extract_request(args: argparse.Namespace, settings: Settings) -> ExtractionRequest:
    """Build extraction request from CLI arguments.

    Args:
        args (argparse.Namespace): Parsed CLI args.
        settings (Settings): Runtime settings providing defaults.

    Returns:
        ExtractionRequest: Request object.
    """
    payload: dict[str, object] = {
        "documents": args.documents,
        "output_root": args.output_root,
        "page_spec": args.page_spec,
        "density": args.density or settings.default_density,
        "sizes": args.sizes or [],
        "rolling": args.rolling,
    }
    if args.formats:
        payload["formats"] = args.formats
    return ExtractionRequest.model_validate(payload)


def main() -> int:
    """Run the CLI.

    Returns:
        int: Exit code (0 for success, 1 for error, 124 for an engine timeout).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args()

    if args.command != "extract":
        parser.print_help()
        return 0

    if getattr(args, "timeout", None):
        settings = settings.model_copy(update={"command_timeout": args.timeout})

    try:
        request = _build_extract_request(args, settings)
    except ValidationError as exc:
        logger.error("Invalid extraction request", extra={"errors": str(exc)})
        return 2

    try:
        ensure_cli_dependencies_for_extract(needs_page_count=needs_page_count(request.page_spec))
        resolve_engine_binary(settings)
        summary = ImageExtractor(settings).extract(request)
    except ExtractionTimeoutError:
        logger.exception("Extraction timed out")
        return EXIT_TIMEOUT
    except PackageError:
        logger.exception("Extraction failed")
        return 1
    except KeyboardInterrupt:
        logger.info("Extraction aborted by user")
        return 130
    except Exception:
        logger.exception("Unexpected error during extraction")
        return 1

    logger.info(
        "Images written",
        extra={"output_root": str(request.output_root), "files": len(summary.files)},
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
