"""Page specification parsing."""

from __future__ import annotations

from rasterpages.exceptions import InvalidPageSpecError


def needs_page_count(spec: str | None) -> bool:
    """Return whether resolving `spec` requires the document page count.

    Args:
        spec (str | None): Page specification, e.g. `1-3,5,9-`.

    Returns:
        bool: True when the spec is absent or contains an open-ended range.
    """
    if spec is None:
        return True
    return any(token.strip().endswith("-") for token in spec.split(","))


def _parse_page_number(spec: str, token: str, raw: str) -> int:
    value = raw.strip()
    if not (value.isascii() and value.isdigit()):
        raise InvalidPageSpecError(spec=spec, token=token)
    number = int(value)
    if number < 1:
        raise InvalidPageSpecError(spec=spec, token=token, reason="page numbers start at 1, got")
    return number


def _expand_token(spec: str, token: str, total_pages: int | None) -> range:
    """Expand one comma-separated token into its page range."""
    if "-" not in token:
        page = _parse_page_number(spec, token, token)
        return range(page, page + 1)

    start_raw, _, end_raw = token.partition("-")
    start = _parse_page_number(spec, token, start_raw)
    if not end_raw.strip():
        if total_pages is None:
            raise InvalidPageSpecError(
                spec=spec,
                token=token,
                reason="open-ended range needs a page count for",
            )
        return range(start, total_pages + 1)

    end = _parse_page_number(spec, token, end_raw)
    # Reversed ranges are left to the caller and select nothing.
    return range(start, end + 1)


def resolve_pages(spec: str | None, total_pages: int | None = None) -> list[int]:
    """Expand a page specification into ascending, unique page numbers.

    Tokens are separated by commas and are either a page (`5`), an inclusive
    range (`1-3`) or an open-ended range (`9-`) running to the last page.

    Args:
        spec (str | None): Page specification, or None for every page.
        total_pages (int | None): Document page count, required when `spec` is
            None or contains an open-ended range.

    Raises:
        InvalidPageSpecError: If a token is malformed, or a page count is
            required but missing.

    Returns:
        list[int]: Sorted, deduplicated 1-based page numbers.
    """
    if spec is None:
        if total_pages is None:
            raise InvalidPageSpecError(spec=spec, reason="a page count is required when no pages are given")
        return list(range(1, total_pages + 1))

    pages: set[int] = set()
    for token in spec.split(","):
        if not token.strip():
            continue
        pages.update(_expand_token(spec, token.strip(), total_pages))
    return sorted(pages)
