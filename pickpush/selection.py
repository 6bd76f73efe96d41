"""
PICKPUSH Selection Grammar

Turns what the operator typed at the file prompt into a selection:

    q | quit          cancel the run
    a | all           every change
    3                 one index
    1,3,5  / 1 3 5    lists (commas and whitespace are interchangeable)
    2-6               inclusive range; a reversed range selects nothing
    1,3-5,7           any combination of the above

The grammar is permissive on purpose. Unknown tokens and indices outside
1..max_index are dropped rather than rejected, and parse() never raises.
"""

from __future__ import annotations

import re

from pickpush.state import Cancelled, Indices, ParsedSelection, SelectAll

_CANCEL_RE = re.compile(r"^q(uit)?$", re.IGNORECASE)
_ALL_RE = re.compile(r"^a(ll)?$", re.IGNORECASE)
_SEPARATOR_RE = re.compile(r"[,\s]+")
_INDEX_RE = re.compile(r"^\d+$", re.ASCII)
_RANGE_RE = re.compile(r"^(\d+)-(\d+)$", re.ASCII)


def parse(text: str, max_index: int) -> ParsedSelection:
    """Parse selection text against a snapshot of ``max_index`` records."""
    stripped = (text or "").strip()

    if _CANCEL_RE.match(stripped):
        return Cancelled()
    if _ALL_RE.match(stripped):
        return SelectAll()

    chosen: set[int] = set()
    for token in _SEPARATOR_RE.split(stripped):
        chosen |= _token_indices(token, max_index)

    return Indices(values=frozenset(chosen))


def _token_indices(token: str, max_index: int) -> set[int]:
    if _INDEX_RE.match(token):
        value = int(token)
        return {value} if 1 <= value <= max_index else set()

    match = _RANGE_RE.match(token)
    if match:
        start, end = int(match.group(1)), int(match.group(2))
        if start > end:
            return set()
        # Clip before expanding so huge bounds stay cheap.
        return set(range(max(start, 1), min(end, max_index) + 1))

    return set()


def describe(selection: ParsedSelection) -> str:
    """Compact text form of a selection, e.g. ``1,3-5,7``."""
    if isinstance(selection, Cancelled):
        return "quit"
    if isinstance(selection, SelectAll):
        return "all"
    if selection.empty:
        return "<none>"

    parts: list[str] = []
    ordered = sorted(selection.values)
    start = prev = ordered[0]
    for value in ordered[1:] + [None]:
        if value is not None and value == prev + 1:
            prev = value
            continue
        parts.append(str(start) if start == prev else f"{start}-{prev}")
        if value is not None:
            start = prev = value
    return ",".join(parts)
