from __future__ import annotations

from pathlib import Path

import pytest

from rasterpages.engine import EngineCommandBuilder, quality_for
from rasterpages.settings import Settings
from rasterpages.typing.models import SizeSpec


@pytest.mark.parametrize(
    ("image_format", "expected"),
    [("jpg", "85"), ("jpeg", "85"), ("png", "100"), ("png8", "100"), ("gif", None), ("tiff", None)],
)
def test_quality_for_format(image_format: str, expected: str | None) -> None:
    assert quality_for(image_format) == expected


def test_convert_page_command_uses_zero_based_page_index() -> None:
    builder = EngineCommandBuilder()

    command = builder.convert_page(
        document=Path("/in/my doc.pdf"),
        page=3,
        output_file=Path("/out/my doc_3.png"),
        density="150",
        size=SizeSpec(label="700x"),
        image_format="png",
    )

    assert command == [
        "gm",
        "convert",
        "+adjoin",
        "-define",
        "pdf:use-cropbox=true",
        "-limit",
        "memory",
        "256MiB",
        "-limit",
        "map",
        "512MiB",
        "-density",
        "150",
        "-resize",
        "700x",
        "-quality",
        "100",
        "/in/my doc.pdf[2]",
        "/out/my doc_3.png",
    ]


def test_convert_page_without_resize_or_quality() -> None:
    command = EngineCommandBuilder().convert_page(
        document=Path("doc.pdf"),
        page=1,
        output_file=Path("doc_1.gif"),
        density="72",
        size=SizeSpec.original(),
        image_format="gif",
    )

    assert "-resize" not in command
    assert "-quality" not in command
    assert command[-2:] == ["doc.pdf[0]", "doc_1.gif"]


def test_convert_page_rejects_page_zero() -> None:
    with pytest.raises(ValueError, match="start at 1"):
        EngineCommandBuilder().convert_page(
            document=Path("doc.pdf"),
            page=0,
            output_file=Path("doc_0.png"),
            density="150",
            size=None,
            image_format="png",
        )


def test_mogrify_command_downsamples_every_file_in_one_call() -> None:
    files = [Path("/out/100x/doc_1.jpg"), Path("/out/100x/doc_2.jpg")]

    command = EngineCommandBuilder().mogrify_files(
        files=files,
        density="150",
        size=SizeSpec(label="100x"),
        image_format="jpg",
    )

    assert command[:2] == ["gm", "mogrify"]
    assert command[command.index("-resize") + 1] == "100x"
    assert command[command.index("-quality") + 1] == "85"
    assert command[command.index("-unsharp") + 1] == "0x0.5+0.75"
    assert command[-2:] == ["/out/100x/doc_1.jpg", "/out/100x/doc_2.jpg"]


def test_mogrify_requires_files() -> None:
    with pytest.raises(ValueError, match="at least one file"):
        EngineCommandBuilder().mogrify_files(files=[], density="150", size=SizeSpec(label="100x"), image_format="png")


def test_builder_from_settings_splits_engine_binary() -> None:
    settings = Settings(engine_binary="/opt/gm/bin/gm", memory_limit="128MiB", map_limit="1GiB")

    command = EngineCommandBuilder.from_settings(settings).convert_page(
        document=Path("doc.pdf"),
        page=1,
        output_file=Path("doc_1.png"),
        density="150",
        size=None,
        image_format="png",
    )

    assert command[:2] == ["/opt/gm/bin/gm", "convert"]
    assert command[5:11] == ["-limit", "memory", "128MiB", "-limit", "map", "1GiB"]
