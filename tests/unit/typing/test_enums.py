from __future__ import annotations

import pytest

from rasterpages.typing.enums import ProcessOutcome, RenderSource


def test_enum_round_trip_from_str() -> None:
    assert ProcessOutcome.from_str("timeout") == ProcessOutcome.TIMEOUT
    assert RenderSource.PREVIOUS_SIZE.to_str() == "previous_size"


def test_enum_from_str_lists_supported_values() -> None:
    with pytest.raises(ValueError, match="Expected one of: success, failed, timeout"):
        ProcessOutcome.from_str("crashed")
