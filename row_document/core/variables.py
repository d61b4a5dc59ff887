"""Variable substitution for configuration strings.

Supports ``${NAME}`` and ``%%NAME%%`` references. References without a
value in the supplied mapping are left in place so that a later pass (or
the caller) can still see them.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping

# ${NAME} or %%NAME%%; names may contain dots and dashes (e.g. ${db.name})
_VARIABLE_PATTERN = re.compile(r"\$\{([^}]+)\}|%%([^%]+)%%")


class VariableSpace(dict[str, str]):
    """A plain name -> value mapping used for substitution."""

    @classmethod
    def from_environment(cls, **overrides: str) -> VariableSpace:
        """Seed a variable space from ``os.environ``, then apply *overrides*."""
        space = cls(os.environ)
        space.update(overrides)
        return space


def has_variables(text: str | None) -> bool:
    """Return True if *text* contains at least one variable reference."""
    if not text:
        return False
    return _VARIABLE_PATTERN.search(text) is not None


def substitute(text: str | None, variables: Mapping[str, str] | None = None) -> str:
    """Replace variable references in *text* with values from *variables*.

    Args:
        text: String possibly containing ``${NAME}`` / ``%%NAME%%``.
        variables: Values to substitute. ``None`` means no substitution.

    Returns:
        The substituted string; ``None`` becomes ``""``.
    """
    if not text:
        return ""
    if not variables:
        return text

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1) if match.group(1) is not None else match.group(2)
        value = variables.get(name)
        return match.group(0) if value is None else str(value)

    return _VARIABLE_PATTERN.sub(_replace, text)
