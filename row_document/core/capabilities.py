"""Capability protocols for an output step definition.

A host runtime drives the definition only through these three
interfaces; registration and dialog wiring live in the host.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from row_document.core.validation import CheckResult, MessageCatalog
    from row_document.persistence.attributes import AttributeStore


@runtime_checkable
class Configurable(Protocol):
    """Supports defaults, cloning and compilation into a run-time plan."""

    def set_default(self) -> None:
        """Reset every option to its default value."""
        ...

    def clone(self) -> Any:
        """Return an independent deep copy."""
        ...

    def compile(self, variables: Mapping[str, str] | None = None) -> Any:
        """Compile into a plan owned by one worker."""
        ...


@runtime_checkable
class Persistable(Protocol):
    """Supports both persisted encodings."""

    def to_markup(self) -> str:
        """Serialize to the nested markup encoding."""
        ...

    def save_attributes(self, store: AttributeStore, step_id: str) -> None:
        """Serialize into a flat attribute store under *step_id*."""
        ...


@runtime_checkable
class Validatable(Protocol):
    """Produces advisory check results."""

    def check(
        self,
        has_upstream_schema: bool,
        upstream_row_count: int,
        has_input_hops: bool,
        catalog: MessageCatalog | None = None,
    ) -> list[CheckResult]:
        """Return advisory results for the given host topology."""
        ...
