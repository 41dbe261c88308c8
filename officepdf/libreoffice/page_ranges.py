"""Validation of LibreOffice page range expressions (``1-3,5,8-``)."""

from __future__ import annotations

import re

from ..exceptions import MalformedPageRangesError

_TOKEN = re.compile(r"^(\d+)(?:\s*-\s*(\d*))?$")


def validate_page_ranges(page_ranges: str) -> str:
    """Return *page_ranges* normalised for LibreOffice's ``PageRange`` option.

    An empty expression selects every page. Tokens are separated by commas or
    semicolons; each token is a page ``N``, a range ``N-M`` with ``N <= M`` or
    an open range ``N-``. Page numbers start at 1.
    """

    if not page_ranges.strip():
        return ""

    tokens = [token.strip() for token in re.split(r"[,;]", page_ranges)]
    normalised: list[str] = []
    for token in tokens:
        match = _TOKEN.match(token)
        if match is None:
            raise MalformedPageRangesError(page_ranges)
        start = int(match.group(1))
        end_raw = match.group(2)
        if start < 1:
            raise MalformedPageRangesError(page_ranges)
        if end_raw is None:
            normalised.append(str(start))
        elif end_raw == "":
            normalised.append(f"{start}-")
        else:
            end = int(end_raw)
            if end < start:
                raise MalformedPageRangesError(page_ranges)
            normalised.append(f"{start}-{end}")

    return ",".join(normalised)


__all__ = ["validate_page_ranges"]
