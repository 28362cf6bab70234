"""Character-accurate pagination of long rendered text.

A chunk ends near ``start_index + chunk_size``. With smart breaks on, the
end is moved to a nearby structural boundary so JSON objects and lines are
not cut in half. Boundary kinds are tried in priority order and the first
kind with any match in the search window wins; within that kind the match
closest to the naive end is used.
"""

from __future__ import annotations

import re

from pydantic import BaseModel

from openapi_context.errors import PaginationError

DEFAULT_CHUNK_SIZE = 2000

LOOKBEHIND_RATIO = 0.8
LOOKAHEAD_CHARS = 200

# Ordered by priority; a chunk ends at match.end()
BREAK_PATTERNS = (
    re.compile(r"\},[ \t]*\n?"),  # end of object, then comma
    re.compile(r"\],[ \t]*\n?"),  # end of array, then comma
    re.compile(r",\n(?=[ \t]*\")"),  # end of property, next line opens a key
    re.compile(r"\n[ \t]*\n"),  # blank line
    re.compile(r"\n"),
)


class PaginatedResult(BaseModel):
    content: str
    start_index: int
    end_index: int
    total_length: int
    has_more: bool
    has_previous: bool
    next_index: int | None = None
    prev_index: int | None = None
    navigation: str


def paginate(
    text: str,
    start_index: int = 0,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    smart_breaks: bool = True,
) -> PaginatedResult:
    """Return the chunk of ``text`` starting at ``start_index``.

    Follow ``next_index`` until ``has_more`` is false to walk the whole text.
    """
    if chunk_size <= 0:
        raise PaginationError(f"Chunk size must be positive, got {chunk_size}")
    if start_index < 0:
        raise PaginationError(f"Start index must not be negative, got {start_index}")

    total = len(text)
    if total <= chunk_size:
        return PaginatedResult(
            content=text,
            start_index=0,
            end_index=total,
            total_length=total,
            has_more=False,
            has_previous=False,
            navigation=f"Complete content: {total} characters",
        )

    if start_index >= total:
        raise PaginationError(
            f"Start index {start_index} exceeds available content ({total} characters)"
        )

    end = min(start_index + chunk_size, total)
    if smart_breaks and end < total:
        end = find_break(text, start_index, end, chunk_size)

    has_more = end < total
    has_previous = start_index > 0
    next_index = end if has_more else None
    prev_index = max(0, start_index - chunk_size) if has_previous else None

    lines = [f"Showing characters {start_index}-{end} of {total} total"]
    if prev_index is not None:
        lines.append(f"Previous chunk: Use index={prev_index}")
    if next_index is not None:
        lines.append(f"Next chunk: Use index={next_index}")

    return PaginatedResult(
        content=text[start_index:end],
        start_index=start_index,
        end_index=end,
        total_length=total,
        has_more=has_more,
        has_previous=has_previous,
        next_index=next_index,
        prev_index=prev_index,
        navigation="\n".join(lines),
    )


def find_break(text: str, start_index: int, naive_end: int, chunk_size: int) -> int:
    """Best boundary near ``naive_end``, or ``naive_end`` when none is found."""
    window_start = max(start_index + 1, naive_end - int(chunk_size * LOOKBEHIND_RATIO))
    window_end = min(len(text), naive_end + LOOKAHEAD_CHARS)

    for pattern in BREAK_PATTERNS:
        candidates = [m.end() for m in pattern.finditer(text, window_start, window_end)]
        if candidates:
            return min(candidates, key=lambda pos: abs(pos - naive_end))
    return naive_end
