"""
Fluent builder for OData-style `$filter` expressions.

Example:
    from odata_search import SearchBuilder

    query = (
        SearchBuilder()
        .open_group()
        .eq("status", "active")
        .or_()
        .eq("status", "pending")
        .close_group()
        .and_()
        .gt("createdDate", datetime(2023, 1, 1, tzinfo=timezone.utc))
        .build()
    )
    # (status eq 'active' or status eq 'pending') and createdDate gt 2023-01-01T00:00:00.000Z

The builder only appends pre-formatted clauses. It does not check that groups
are balanced or that logical operators sit between conditions.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from . import clauses
from .exceptions import InvalidOperatorError
from .operators import AnyOptions, Operator
from .values import Value


class SearchBuilder:
    """Ordered sequence of filter clauses with a chainable API."""

    def __init__(self) -> None:
        self._parts: list[str] = []

    def _add(self, clause: str) -> SearchBuilder:
        self._parts.append(clause)
        return self

    @property
    def parts(self) -> tuple[str, ...]:
        """Snapshot of the clauses added so far."""
        return tuple(self._parts)

    def clone(self) -> SearchBuilder:
        """
        Create an independent copy of this builder.

        Example:
            base = SearchBuilder().eq("status", "active")
            users = base.clone().and_().eq("type", "user")
            admins = base.clone().and_().eq("type", "admin")
        """
        copy = SearchBuilder()
        copy._parts = list(self._parts)
        return copy

    __copy__ = clone

    def build(self) -> str:
        """
        Join the clauses into a filter string.

        Clauses are separated by single spaces, except directly inside a group:
        `(a eq 1 or b eq 2)`.
        """
        pieces: list[str] = []
        for part in self._parts:
            if pieces and pieces[-1] != "(" and part != ")":
                pieces.append(" ")
            pieces.append(part)
        return "".join(pieces)

    # =========================================================================
    # Logical operators and grouping
    # =========================================================================

    def and_(self) -> SearchBuilder:
        return self._add("and")

    def or_(self) -> SearchBuilder:
        return self._add("or")

    def not_(self) -> SearchBuilder:
        return self._add("not")

    def open_group(self) -> SearchBuilder:
        return self._add("(")

    def close_group(self) -> SearchBuilder:
        return self._add(")")

    # =========================================================================
    # Conditions
    # =========================================================================

    def eq(self, field: str, value: Value) -> SearchBuilder:
        """Add `<field> eq <value>`."""
        return self._add(clauses.eq(field, value))

    def ne(self, field: str, value: Value) -> SearchBuilder:
        """Add `<field> ne <value>`."""
        return self._add(clauses.ne(field, value))

    def gt(self, field: str, value: Value) -> SearchBuilder:
        """Add `<field> gt <value>`."""
        return self._add(clauses.gt(field, value))

    def lt(self, field: str, value: Value) -> SearchBuilder:
        """Add `<field> lt <value>`."""
        return self._add(clauses.lt(field, value))

    def ge(self, field: str, value: Value) -> SearchBuilder:
        """Add `<field> ge <value>`."""
        return self._add(clauses.ge(field, value))

    def le(self, field: str, value: Value) -> SearchBuilder:
        """Add `<field> le <value>`."""
        return self._add(clauses.le(field, value))

    def in_(self, field: str, values: Sequence[Value]) -> SearchBuilder:
        """Add `<field> in (<v1>, <v2>, ...)`."""
        return self._add(clauses.in_clause(field, values))

    def contains(self, field: str, value: Value) -> SearchBuilder:
        """Add `contains(<field>, <value>)`."""
        return self._add(clauses.contains(field, value))

    def startswith(self, field: str, value: Value) -> SearchBuilder:
        """Add `startswith(<field>, <value>)`."""
        return self._add(clauses.startswith(field, value))

    def endswith(self, field: str, value: Value) -> SearchBuilder:
        """Add `endswith(<field>, <value>)`."""
        return self._add(clauses.endswith(field, value))

    def any(self, field: str, options: AnyOptions | Mapping[str, Any]) -> SearchBuilder:
        """Add `(<field>/any(x:(x <op> <value>)))` for a collection field."""
        return self._add(clauses.any_clause(field, options))

    def condition(self, operator: Operator | str, field: str, value: Value) -> SearchBuilder:
        """
        Add a comparison or string predicate chosen by operator name.

        Raises:
            InvalidOperatorError: If `operator` is not one of eq, ne, gt, lt,
                ge, le, contains, startswith, endswith.
        """
        fn = clauses.resolve_generator(operator)
        if fn is None:
            raise InvalidOperatorError(operator)
        return self._add(fn(field, value))

    # =========================================================================
    # Dunder helpers
    # =========================================================================

    def __len__(self) -> int:
        return len(self._parts)

    def __bool__(self) -> bool:
        return bool(self._parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchBuilder):
            return NotImplemented
        return self._parts == other._parts

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return self.build()

    def __repr__(self) -> str:
        return f"SearchBuilder({self.build()!r})"
