"""Advisory validation of an output step against its host topology.

Results are collected and returned; nothing here raises or blocks a load
or save. Message text comes from a MessageCatalog passed in explicitly.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from row_document.core.enums import Severity

logger = logging.getLogger(__name__)

NO_UPSTREAM_FIELDS = "check.no_upstream_fields"
RECEIVING_FIELDS = "check.receiving_fields"
RECEIVING_INPUT = "check.receiving_input"
NO_INPUT = "check.no_input"

DEFAULT_MESSAGES: dict[str, str] = {
    NO_UPSTREAM_FIELDS: "Not receiving any fields from previous steps!",
    RECEIVING_FIELDS: "Step is connected to previous one, receiving {count} fields",
    RECEIVING_INPUT: "Step is receiving info from other steps.",
    NO_INPUT: "No input received from other steps!",
}


class MessageCatalog:
    """Key -> template lookup with ``str.format`` arguments.

    Unknown keys render as the key itself so a missing translation never
    hides a result.
    """

    def __init__(self, messages: Mapping[str, str] | None = None) -> None:
        self._messages = dict(DEFAULT_MESSAGES)
        if messages:
            self._messages.update(messages)

    def get(self, key: str, **kwargs: object) -> str:
        template = self._messages.get(key)
        if template is None:
            logger.debug("No message for key %r", key)
            return key
        return template.format(**kwargs)


@dataclass(frozen=True)
class CheckResult:
    """One advisory finding."""

    severity: Severity
    message: str

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR


class ValidationService:
    """Checks upstream schema and input-hop facts supplied by the host."""

    def __init__(self, catalog: MessageCatalog | None = None) -> None:
        self._catalog = catalog or MessageCatalog()

    def check(
        self,
        has_upstream_schema: bool,
        upstream_row_count: int,
        has_input_hops: bool,
    ) -> list[CheckResult]:
        """Return ordered advisory results.

        Args:
            has_upstream_schema: Whether a previous step supplies a schema.
            upstream_row_count: Number of fields in that schema.
            has_input_hops: Whether any step feeds this one.
        """
        results: list[CheckResult] = []

        if not has_upstream_schema or upstream_row_count == 0:
            results.append(
                CheckResult(Severity.WARNING, self._catalog.get(NO_UPSTREAM_FIELDS))
            )
        else:
            results.append(
                CheckResult(
                    Severity.OK,
                    self._catalog.get(RECEIVING_FIELDS, count=upstream_row_count),
                )
            )

        if has_input_hops:
            results.append(CheckResult(Severity.OK, self._catalog.get(RECEIVING_INPUT)))
        else:
            results.append(CheckResult(Severity.ERROR, self._catalog.get(NO_INPUT)))

        return results
