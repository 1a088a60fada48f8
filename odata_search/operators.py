"""
Operator names understood by the builder and the parser.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class Operator(str, Enum):
    """Closed set of clause operators."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    LT = "lt"
    GE = "ge"
    LE = "le"
    CONTAINS = "contains"
    STARTSWITH = "startswith"
    ENDSWITH = "endswith"
    IN = "in"
    ANY = "any"

    @classmethod
    def lookup(cls, name: object) -> Operator | None:
        """Return the operator for `name`, or None if there is none."""
        if isinstance(name, Operator):
            return name
        try:
            return cls(name)
        except ValueError:
            return None


class AnyOptions(BaseModel):
    """
    Condition applied to each element of a collection field.

    Example:
        AnyOptions(operator="eq", value="important")
        # -> (tags/any(x:(x eq 'important')))

    The operator is kept as given and resolved when the clause is built, so an
    unknown name surfaces as `InvalidOperatorError` rather than a validation
    error.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    operator: Operator | str
    value: Any
