"""
Exceptions raised by the builder and the parser.

Every error derives from `ODataSearchError`. The concrete classes also inherit
from the matching builtin (`TypeError` / `ValueError`) so callers that only
catch builtins keep working.
"""

from __future__ import annotations


class ODataSearchError(Exception):
    """Base class for all odata_search errors."""

    def __init__(self, message: str | None = None, *args: object) -> None:
        self.message = message or self.__class__.__name__
        super().__init__(self.message, *args)

    def __str__(self) -> str:
        return self.message


class FilterArgumentError(ODataSearchError, TypeError):
    """A builder method received an argument it cannot format."""

    def __init__(self, message: str, *, argument: object = None) -> None:
        super().__init__(message)
        self.argument = argument


class InvalidOperatorError(ODataSearchError, ValueError):
    """An `any` clause asked for an operator with no clause generator."""

    def __init__(self, operator: object, message: str | None = None) -> None:
        if message is None:
            message = f"Invalid operator for 'any': {operator!r}"
        super().__init__(message)
        self.operator = operator


class FilterSyntaxError(ODataSearchError, ValueError):
    """
    The parser could not recombine the token stream into builder calls.

    Attributes:
        token: Text of the offending token, or None at end of input.
        index: Index of the offending token in the token stream.
        position: Character offset of the token in the filter text, if known.
    """

    def __init__(
        self,
        message: str,
        *,
        token: str | None = None,
        index: int | None = None,
        position: int | None = None,
    ) -> None:
        super().__init__(message)
        self.token = token
        self.index = index
        self.position = position
