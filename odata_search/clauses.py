"""
Stateless clause generators.

Each function returns one formatted clause string and has no side effects.
`SearchBuilder` appends the output of these functions; they are also usable on
their own:

    >>> eq("name", "Miguel")
    "name eq 'Miguel'"
    >>> in_clause("id", [1, 2, 3])
    'id in (1, 2, 3)'
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from .exceptions import FilterArgumentError, InvalidOperatorError
from .operators import AnyOptions, Operator
from .values import Value, format_value

ClauseFunc = Callable[[str, Value], str]

# Bound variable name used inside lambda clauses
LAMBDA_VARIABLE = "x"

# =============================================================================
# Comparisons
# =============================================================================


def _comparison(field: str, op: Operator, value: Value) -> str:
    return f"{field} {op.value} {format_value(value)}"


def eq(field: str, value: Value) -> str:
    """Field equals value."""
    return _comparison(field, Operator.EQ, value)


def ne(field: str, value: Value) -> str:
    """Field does not equal value."""
    return _comparison(field, Operator.NE, value)


def gt(field: str, value: Value) -> str:
    """Field is greater than value."""
    return _comparison(field, Operator.GT, value)


def lt(field: str, value: Value) -> str:
    """Field is less than value."""
    return _comparison(field, Operator.LT, value)


def ge(field: str, value: Value) -> str:
    """Field is greater than or equal to value."""
    return _comparison(field, Operator.GE, value)


def le(field: str, value: Value) -> str:
    """Field is less than or equal to value."""
    return _comparison(field, Operator.LE, value)


# =============================================================================
# String predicates
# =============================================================================


def _function(op: Operator, field: str, value: Value) -> str:
    return f"{op.value}({field}, {format_value(value)})"


def contains(field: str, value: Value) -> str:
    """Field contains substring."""
    return _function(Operator.CONTAINS, field, value)


def startswith(field: str, value: Value) -> str:
    """Field starts with prefix."""
    return _function(Operator.STARTSWITH, field, value)


def endswith(field: str, value: Value) -> str:
    """Field ends with suffix."""
    return _function(Operator.ENDSWITH, field, value)


# Operators a lambda (`any`) clause and a function-call token may resolve to
CLAUSE_GENERATORS: Mapping[Operator, ClauseFunc] = MappingProxyType(
    {
        Operator.EQ: eq,
        Operator.NE: ne,
        Operator.GT: gt,
        Operator.LT: lt,
        Operator.GE: ge,
        Operator.LE: le,
        Operator.CONTAINS: contains,
        Operator.STARTSWITH: startswith,
        Operator.ENDSWITH: endswith,
    }
)


def resolve_generator(name: object) -> ClauseFunc | None:
    """Look up the clause generator for an operator name, or None."""
    op = Operator.lookup(name)
    if op is None:
        return None
    return CLAUSE_GENERATORS.get(op)


# =============================================================================
# Collections
# =============================================================================


def in_clause(field: str, values: Sequence[Value]) -> str:
    """
    Field value is one of `values`.

    Raises:
        FilterArgumentError: If `values` is not a list/tuple-like sequence.
    """
    if isinstance(values, (str, bytes, bytearray)) or not isinstance(values, Sequence):
        raise FilterArgumentError(
            f"'in' requires a sequence of values, got {type(values).__name__}",
            argument=values,
        )
    formatted = ", ".join(format_value(v) for v in values)
    return f"{field} in ({formatted})"


def _coerce_any_options(options: AnyOptions | Mapping[str, Any]) -> AnyOptions:
    if isinstance(options, AnyOptions):
        return options
    if not isinstance(options, Mapping):
        raise FilterArgumentError(
            f"'any' options must be AnyOptions or a mapping, got {type(options).__name__}",
            argument=options,
        )
    try:
        return AnyOptions.model_validate(dict(options))
    except ValidationError as e:
        raise FilterArgumentError(f"Invalid 'any' options: {e}", argument=options) from e


def any_clause(field: str, options: AnyOptions | Mapping[str, Any]) -> str:
    """
    Condition on any element of a collection field.

    Example:
        any_clause("tags", {"operator": "eq", "value": "important"})
        # -> "(tags/any(x:(x eq 'important')))"

    Raises:
        InvalidOperatorError: If the operator is not a comparison or string
            predicate (e.g. `and`, `in`, `any`).
        FilterArgumentError: If `options` is malformed.
    """
    opts = _coerce_any_options(options)
    fn = resolve_generator(opts.operator)
    if fn is None:
        raise InvalidOperatorError(opts.operator)
    return f"({field}/any({LAMBDA_VARIABLE}:({fn(LAMBDA_VARIABLE, opts.value)})))"
