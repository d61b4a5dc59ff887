"""Index field-spec parsing.

Grammar::

    spec      := term (',' term)*
    term      := path (':' direction)?
    direction := '1' | '-1'          (default 1)

A path may name a whole embedded document (``person.address``); it is
never expanded into its fields. No check against the row schema is made.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from row_document.core.exceptions import IndexSpecError
from row_document.core.variables import substitute

ASCENDING = 1
DESCENDING = -1


@dataclass(frozen=True)
class IndexTerm:
    """One ``path[:direction]`` term of an index spec."""

    path: str
    direction: int = ASCENDING


def _parse_direction(field_spec: str, raw: str) -> int:
    try:
        direction = int(raw.strip())
    except ValueError:
        raise IndexSpecError(field_spec, f"direction '{raw.strip()}' is not 1 or -1") from None
    if direction not in (ASCENDING, DESCENDING):
        raise IndexSpecError(field_spec, f"direction '{raw.strip()}' is not 1 or -1")
    return direction


def parse_index_fields(
    field_spec: str,
    variables: Mapping[str, str] | None = None,
) -> tuple[IndexTerm, ...]:
    """Parse a comma-separated index field spec into ordered terms.

    Args:
        field_spec: e.g. ``"a.b,c:-1"``.
        variables: Optional values substituted before parsing.

    Returns:
        Terms in declaration order; empty terms are skipped.

    Raises:
        IndexSpecError: On an empty path or a direction other than 1/-1.
    """
    resolved = substitute(field_spec, variables)
    terms: list[IndexTerm] = []
    for part in resolved.split(","):
        part = part.strip()
        if not part:
            continue
        path, sep, direction = part.partition(":")
        path = path.strip()
        if not path:
            raise IndexSpecError(field_spec, f"term '{part}' has no path")
        terms.append(
            IndexTerm(path=path, direction=_parse_direction(field_spec, direction) if sep else ASCENDING)
        )
    return tuple(terms)
