"""Modifier update operators and apply-policies.

Operators only matter when the write runs in modifier-update mode; in any
other mode every mapped field is part of a whole-document insert/replace.

| Operator  | Effect                                                        |
|-----------|---------------------------------------------------------------|
| N/A       | part of the whole-document body                               |
| $set      | overwrite the value at the path                               |
| $inc      | numeric add at the path                                       |
| $push     | append to the array at the path, ``[value]`` if it is absent; |
|           | missing intermediate arrays are not created                   |

Apply-policies decide which branch of an upsert a mapping takes part in.

Pushing into an array that another mapping of the same row seeds with $set
conflicts, because both modify the same path in one write. Split such a
field into an Insert-only $set and an Update-only $push. This is not
checked here.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from row_document.core.exceptions import ModifierPolicyError

if TYPE_CHECKING:
    from row_document.mapping.model import FieldMapping


class ModifierOperation(Enum):
    """Per-field update operator."""

    NONE = "N/A"
    SET = "$set"
    INCREMENT = "$inc"
    PUSH = "$push"

    @classmethod
    def from_token(cls, token: str | None) -> ModifierOperation:
        """Parse a persisted operator token; blank means NONE."""
        if token is None or not token.strip():
            return cls.NONE
        value = token.strip()
        for op in cls:
            if op.value.lower() == value.lower():
                return op
        raise ModifierPolicyError("modifier operation", value)

    @property
    def requires_numeric(self) -> bool:
        return self is ModifierOperation.INCREMENT

    @property
    def creates_array(self) -> bool:
        return self is ModifierOperation.PUSH


class ApplyPolicy(Enum):
    """Which half of an upsert a modifier mapping participates in."""

    INSERT_ONLY = "Insert"
    UPDATE_ONLY = "Update"
    INSERT_AND_UPDATE = "Insert&Update"

    @classmethod
    def from_token(cls, token: str | None) -> ApplyPolicy:
        """Parse a persisted policy token; blank means INSERT_AND_UPDATE."""
        if token is None or not token.strip():
            return cls.INSERT_AND_UPDATE
        value = token.strip()
        for policy in cls:
            if policy.value.lower() == value.lower():
                return policy
        raise ModifierPolicyError("apply policy", value)

    def admits(self, is_insert: bool) -> bool:
        """Return True if this policy applies to the insert (or update) branch."""
        if self is ApplyPolicy.INSERT_AND_UPDATE:
            return True
        if is_insert:
            return self is ApplyPolicy.INSERT_ONLY
        return self is ApplyPolicy.UPDATE_ONLY


class ModifierPolicy:
    """Compatibility rules between the global write mode and field operators.

    Args:
        modifier_update: Whether the write runs in modifier-update mode.
    """

    def __init__(self, modifier_update: bool) -> None:
        self._modifier_update = modifier_update

    @property
    def modifier_update(self) -> bool:
        return self._modifier_update

    def effective_operation(self, mapping: FieldMapping) -> ModifierOperation:
        """The operator a writer should honour for *mapping*.

        Outside modifier-update mode operators are ignored, and match keys
        always belong to the query rather than the update body.
        """
        if not self._modifier_update or mapping.is_match_key:
            return ModifierOperation.NONE
        return mapping.operator

    def is_effective(self, mapping: FieldMapping) -> bool:
        return self.effective_operation(mapping) is not ModifierOperation.NONE

    def applies(self, mapping: FieldMapping, is_insert: bool) -> bool:
        """Return True if *mapping* contributes to the given upsert branch."""
        return self.is_effective(mapping) and mapping.apply_policy.admits(is_insert)

    def requires_existence_check(self, mappings: list[FieldMapping]) -> bool:
        """True when some effective mapping is restricted to one branch.

        Deciding between the insert and update branch needs to know whether
        a matching document exists, which costs the writer a lookup per row.
        """
        return any(
            self.is_effective(m) and m.apply_policy is not ApplyPolicy.INSERT_AND_UPDATE
            for m in mappings
        )
