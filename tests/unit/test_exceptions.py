from rasterpages.exceptions import (
    DependencyError,
    ExtractionFailedError,
    ExtractionTimeoutError,
    InvalidPageSpecError,
    PackageError,
    PageCountError,
    RollingOrderError,
    RollingSourceError,
    SettingsError,
)


def test_root_exception_hierarchy() -> None:
    for error in (
        SettingsError,
        DependencyError,
        InvalidPageSpecError,
        ExtractionFailedError,
        ExtractionTimeoutError,
        RollingOrderError,
        RollingSourceError,
        PageCountError,
    ):
        assert issubclass(error, PackageError)


def test_timeout_is_distinct_from_failure() -> None:
    assert not issubclass(ExtractionTimeoutError, ExtractionFailedError)
    assert not issubclass(ExtractionFailedError, ExtractionTimeoutError)


def test_error_messages_carry_diagnostics() -> None:
    failed = ExtractionFailedError(output="bad xref", exit_code=1, command=("gm", "convert"))
    timeout = ExtractionTimeoutError(timeout_seconds=300, output="", command=("gm", "convert"))

    assert str(failed) == "gm exited with status 1: bad xref"
    assert str(timeout) == "gm killed after 300s timeout"
    assert str(RollingSourceError(source_dir="/out/300x", missing=["a_2.png"])).endswith("missing: a_2.png")


def test_rolling_order_error_names_both_sizes() -> None:
    assert str(RollingOrderError(previous="100x", current="300x")) == (
        "Rolling sizes must be given largest first: '300x' is larger than the preceding size '100x'"
    )
    assert "cannot be downsampled" in str(
        RollingOrderError(previous="300x", current="50%", reason="is a percentage and cannot be downsampled from"),
    )
