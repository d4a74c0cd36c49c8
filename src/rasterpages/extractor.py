"""Extraction orchestration."""

from __future__ import annotations

import shutil
import tempfile
from itertools import pairwise
from pathlib import Path
from typing import TYPE_CHECKING

from rasterpages.engine import EngineCommandBuilder
from rasterpages.exceptions import PackageError, RollingOrderError, RollingSourceError
from rasterpages.logging import get_logger
from rasterpages.page_count import count_pages
from rasterpages.process_runner import ProcessRunner
from rasterpages.processing.layout import ensure_directory, plan_layout
from rasterpages.processing.page_ranges import needs_page_count, resolve_pages
from rasterpages.settings import Settings, get_settings
from rasterpages.typing.enums import RenderSource
from rasterpages.typing.models import (
    DocumentSummary,
    ExtractionRequest,
    ExtractionSummary,
    OutputLayout,
    RenderJob,
    SizeSpec,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from rasterpages.typing.protocol import CommandRunner, PageCounter

logger = get_logger(__name__)


def validate_rolling_order(sizes: Sequence[SizeSpec]) -> None:
    """Ensure rolling sizes never grow from one step to the next.

    Sizes that cannot be ordered against each other (e.g. `300x` then `x200`)
    are accepted with a warning. A percentage cannot follow a pixel geometry.

    Args:
        sizes (Sequence[SizeSpec]): Sizes in request order.

    Raises:
        RollingOrderError: If a size is larger than the size preceding it, or is a
            percentage following a pixel geometry.
    """
    for previous, current in pairwise(sizes):
        if current.is_relative and not (previous.is_relative or previous.is_original):
            raise RollingOrderError(
                previous=previous.label,
                current=current.label,
                reason="is a percentage and cannot be downsampled from the pixel size",
            )
        order = current.compare(previous)
        if order is None:
            logger.warning(
                "Rolling sizes cannot be compared, downsampling order is not checked",
                extra={"previous_size": previous.label, "size": current.label},
            )
            continue
        if order > 0:
            raise RollingOrderError(previous=previous.label, current=current.label)


class ImageExtractor:
    """Rasterize documents into page images through the external engine."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        runner: CommandRunner | None = None,
        page_counter: PageCounter | None = None,
        commands: EngineCommandBuilder | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.runner = runner or ProcessRunner.from_settings(self.settings)
        self.page_counter = page_counter or count_pages
        self.commands = commands or EngineCommandBuilder.from_settings(self.settings)

    def extract(self, request: ExtractionRequest) -> ExtractionSummary:
        """Process every document of a request, one after the other.

        Args:
            request (ExtractionRequest): What to render and where.

        Raises:
            PackageError: On the first failing document; later documents are not processed.

        Returns:
            ExtractionSummary: Written files and invocation counts per document.
        """
        sizes = request.effective_sizes
        if request.rolling:
            validate_rolling_order(sizes)
        layout = plan_layout(request.output_root, sizes)

        summary = ExtractionSummary()
        for document in request.documents:
            summary.documents.append(self.extract_document(document, request, layout))

        logger.info(
            "Extraction completed",
            extra={"documents": len(summary.documents), "files": len(summary.files), "invocations": summary.invocations},
        )
        return summary

    def extract_document(self, document: Path, request: ExtractionRequest, layout: OutputLayout) -> DocumentSummary:
        """Render one document at every requested size and format.

        Args:
            document (Path): Source document.
            request (ExtractionRequest): Request options.
            layout (OutputLayout): Planned output directories.

        Returns:
            DocumentSummary: Files written for this document.
        """
        pages = self._resolve_pages(document, request.page_spec)
        summary = DocumentSummary(document=document, pages=pages)
        logger.info("Extracting document", extra={"input_path": str(document), "pages": len(pages)})

        previous: SizeSpec | None = None
        try:
            for size in request.effective_sizes:
                for image_format in request.formats:
                    job = self._plan_job(document, size, image_format, pages, layout, previous)
                    files, invocations = self._run_job(job, density=request.density)
                    summary.files.extend(files)
                    summary.invocations += invocations
                if request.rolling:
                    previous = size
        except PackageError:
            logger.warning(
                "Document extraction aborted",
                extra={"input_path": str(document), "files_written": len(summary.files)},
            )
            raise
        return summary

    def _resolve_pages(self, document: Path, page_spec: str | None) -> list[int]:
        total_pages = self.page_counter(document) if needs_page_count(page_spec) else None
        return resolve_pages(page_spec, total_pages)

    @staticmethod
    def _plan_job(
        document: Path,
        size: SizeSpec,
        image_format: str,
        pages: list[int],
        layout: OutputLayout,
        previous: SizeSpec | None,
    ) -> RenderJob:
        if previous is None:
            return RenderJob(
                document=document,
                size=size,
                format=image_format,
                pages=pages,
                output_dir=layout.directory_for(size),
            )
        return RenderJob(
            document=document,
            size=size,
            format=image_format,
            pages=pages,
            output_dir=layout.directory_for(size),
            source=RenderSource.PREVIOUS_SIZE,
            source_dir=layout.directory_for(previous),
            source_size=previous,
        )

    def _run_job(self, job: RenderJob, *, density: str) -> tuple[list[Path], int]:
        """Run one render job inside its own engine scratch directory.

        Args:
            job (RenderJob): Job to run.
            density (str): Rendering density in DPI.

        Returns:
            tuple[list[Path], int]: Written files and number of engine invocations.
        """
        ensure_directory(job.output_dir)
        with tempfile.TemporaryDirectory(prefix="rasterpages-") as scratch:
            env = {"MAGICK_TMPDIR": scratch, "OMP_NUM_THREADS": str(self.settings.engine_threads)}
            if job.source == RenderSource.PREVIOUS_SIZE:
                return self._downsample(job, density=density, env=env)
            return self._render(job, density=density, env=env)

    def _render(self, job: RenderJob, *, density: str, env: Mapping[str, str]) -> tuple[list[Path], int]:
        """Render each page from the original document, one engine call per page."""
        logger.info(
            "Rendering pages",
            extra={"input_path": str(job.document), "size": job.size.label, "format": job.format, "pages": len(job.pages)},
        )
        files: list[Path] = []
        for page in job.pages:
            output_file = job.output_file(page)
            command = self.commands.convert_page(
                document=job.document,
                page=page,
                output_file=output_file,
                density=density,
                size=job.size,
                image_format=job.format,
            )
            self.runner.run(command, env=env)
            files.append(output_file)
        return files, len(job.pages)

    def _downsample(self, job: RenderJob, *, density: str, env: Mapping[str, str]) -> tuple[list[Path], int]:
        """Copy the previous size's pages and shrink them with a single engine call.

        Raises:
            RollingSourceError: If the previous size did not produce every page.
        """
        if job.source_dir is None:  # pragma: no cover - set by _plan_job
            message = "Rolling job without a source directory"
            raise ValueError(message)

        sources = [job.source_dir / job.file_name(page) for page in job.pages]
        missing = [source.name for source in sources if not source.is_file()]
        if missing:
            raise RollingSourceError(source_dir=str(job.source_dir), missing=missing)
        if not sources:
            logger.info("No pages to downsample", extra={"input_path": str(job.document), "size": job.size.label})
            return [], 0

        logger.info(
            "Downsampling previous size",
            extra={
                "input_path": str(job.document),
                "source_dir": str(job.source_dir),
                "size": job.size.label,
                "resize": job.resize.label,
                "format": job.format,
                "pages": len(sources),
            },
        )
        files = [Path(shutil.copy2(source, job.output_dir / source.name)) for source in sources]
        command = self.commands.mogrify_files(files=files, density=density, size=job.resize, image_format=job.format)
        self.runner.run(command, env=env)
        return files, 1


def extract_images(request: ExtractionRequest, *, settings: Settings | None = None) -> ExtractionSummary:
    """Rasterize the documents of a request with default collaborators.

    Args:
        request (ExtractionRequest): What to render and where.
        settings (Settings | None): Optional settings; defaults to `get_settings()`.

    Returns:
        ExtractionSummary: Written files and invocation counts per document.
    """
    return ImageExtractor(settings).extract(request)
