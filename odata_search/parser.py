"""
Parser that turns a filter string back into a `SearchBuilder`.

The token stream is replayed as builder calls in a single forward pass, so the
result can be inspected or extended:

    >>> builder = parse("(firstName eq 'John' or firstName eq 'Jane') and age ge 25")
    >>> builder.and_().contains("department", "Sales").build()
    "(firstName eq 'John' or firstName eq 'Jane') and age ge 25 and contains(department, 'Sales')"

Literal values are re-emitted in canonical form (numbers in decimal form,
strings with doubled quotes), so the output matches the input up to value
formatting and whitespace.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .builder import SearchBuilder
from .clauses import resolve_generator
from .exceptions import FilterSyntaxError
from .operators import AnyOptions
from .policies import DEFAULT_POLICIES, ParserPolicies
from .tokenizer import Token, TokenType, tokenize
from .values import Value, parse_value

logger = logging.getLogger(__name__)

_FUNCTION_RE = re.compile(r"(?P<name>\w+)\s*\((?P<args>.*)\)", re.DOTALL)
_LAMBDA_RE = re.compile(
    r"\s*(?P<field>[^\s(),]+)/any\(\s*(?P<variable>\w+)\s*:(?P<body>.*)\)\s*", re.DOTALL
)

_VALUE_TOKENS = (TokenType.STRING, TokenType.BARE)


# =============================================================================
# Structured splits of single-token calls
# =============================================================================


@dataclass(frozen=True)
class FunctionCall:
    """A `name(field, value)` token split into its parts."""

    name: str
    field: str
    raw_value: str


@dataclass(frozen=True)
class LambdaCall:
    """A `(field/any(x:(x <op> value)))` token split into its parts."""

    field: str
    variable: str
    operator: str
    raw_value: str


def split_function_call(token: Token, index: int) -> FunctionCall:
    """
    Split a FUNCTION token into name, field and raw value.

    The first comma separates the field from the value; everything after it
    is the value, commas included.
    """
    match = _FUNCTION_RE.fullmatch(token.value.strip())
    if match is None:
        raise FilterSyntaxError(
            f"Malformed function call {token.value!r} at token {index}",
            token=token.value,
            index=index,
            position=token.pos,
        )
    field, sep, raw_value = match.group("args").partition(",")
    field = field.strip()
    raw_value = raw_value.strip()
    if not sep or not field or not raw_value:
        raise FilterSyntaxError(
            f"Expected '{match.group('name')}(field, value)' at token {index}, "
            f"got {token.value!r}",
            token=token.value,
            index=index,
            position=token.pos,
        )
    return FunctionCall(match.group("name"), field, raw_value)


def split_lambda_call(token: Token, index: int, policies: ParserPolicies) -> LambdaCall:
    """
    Split a LAMBDA token into field, variable, operator and raw value.

    The lambda body must be exactly one comparison or string predicate on the
    lambda variable.
    """

    def fail(reason: str) -> FilterSyntaxError:
        return FilterSyntaxError(
            f"{reason} in {token.value!r} at token {index}",
            token=token.value,
            index=index,
            position=token.pos,
        )

    text = token.value.strip()
    if text.startswith("("):
        text = text[1:-1]
    match = _LAMBDA_RE.fullmatch(text)
    if match is None:
        raise fail("Malformed lambda expression")

    field = match.group("field")
    variable = match.group("variable")
    body = tokenize(match.group("body"), policies)
    if len(body) >= 2 and body[0].type is TokenType.LPAREN and body[-1].type is TokenType.RPAREN:
        body = body[1:-1]

    if len(body) == 1 and body[0].type is TokenType.FUNCTION:
        call = split_function_call(body[0], index)
        operator, subject, raw_value = call.name, call.field, call.raw_value
    elif (
        len(body) == 3
        and body[0].type is TokenType.BARE
        and body[1].type is TokenType.COMPARISON
        and body[2].type in _VALUE_TOKENS
    ):
        subject, operator, raw_value = body[0].value, body[1].value, body[2].value
    else:
        raise fail("Lambda body must be a single condition")

    if subject != variable:
        raise fail(f"Lambda body must test '{variable}', not '{subject}'")
    return LambdaCall(field, variable, operator, raw_value)


# =============================================================================
# Recombination
# =============================================================================


class _Parser:
    """Replays a token stream as `SearchBuilder` calls."""

    def __init__(self, tokens: list[Token], policies: ParserPolicies):
        self.tokens = tokens
        self.policies = policies
        self.pos = 0
        self.builder = SearchBuilder()

    def _current(self) -> Token | None:
        """Get current token, or None at end of input."""
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _advance(self) -> Token | None:
        """Advance to next token and return previous."""
        token = self._current()
        self.pos += 1
        return token

    def _error(self, message: str, token: Token | None) -> FilterSyntaxError:
        return FilterSyntaxError(
            message,
            token=token.value if token is not None else None,
            index=self.pos,
            position=token.pos if token is not None else None,
        )

    def _value(self, token: Token) -> Value:
        return parse_value(token.value, self.policies)

    def parse(self) -> SearchBuilder:
        """Replay every token; return the populated builder."""
        while (token := self._current()) is not None:
            if token.type is TokenType.AND:
                self.builder.and_()
            elif token.type is TokenType.OR:
                self.builder.or_()
            elif token.type is TokenType.NOT:
                self.builder.not_()
            elif token.type is TokenType.LPAREN:
                self.builder.open_group()
            elif token.type is TokenType.RPAREN:
                self.builder.close_group()
            elif token.type is TokenType.FUNCTION:
                self._parse_function(token)
            elif token.type is TokenType.LAMBDA:
                self._parse_lambda(token)
            elif token.type is TokenType.BARE:
                self._parse_condition(token)
                continue
            else:
                raise self._error(
                    f"Expected field name at token {self.pos}, got {token.value!r}", token
                )
            self._advance()

        return self.builder

    def _parse_function(self, token: Token) -> None:
        call = split_function_call(token, self.pos)
        if resolve_generator(call.name) is None:
            raise self._error(f"Unsupported function {call.name!r} at token {self.pos}", token)
        logger.debug(f"Function call {call.name}({call.field}, ...)")
        self.builder.condition(call.name, call.field, parse_value(call.raw_value, self.policies))

    def _parse_lambda(self, token: Token) -> None:
        call = split_lambda_call(token, self.pos, self.policies)
        if resolve_generator(call.operator) is None:
            raise self._error(
                f"Unsupported lambda operator {call.operator!r} at token {self.pos}", token
            )
        options = AnyOptions(
            operator=call.operator, value=parse_value(call.raw_value, self.policies)
        )
        self.builder.any(call.field, options)

    def _parse_condition(self, field_token: Token) -> None:
        """Parse `<field> <op> <value>` or `<field> in (<values>)`."""
        field = field_token.value
        self._advance()

        op_token = self._current()
        if op_token is None:
            raise self._error(
                f"Expected operator after field '{field}', but got nothing", op_token
            )

        if op_token.type is TokenType.IN:
            self._advance()
            self._parse_in_list(field)
            return

        if op_token.type is not TokenType.COMPARISON:
            raise self._error(
                f"Unsupported operator {op_token.value!r} after field '{field}' "
                f"at token {self.pos}",
                op_token,
            )
        self._advance()

        value_token = self._current()
        if value_token is None or value_token.type not in _VALUE_TOKENS:
            got = "nothing" if value_token is None else repr(value_token.value)
            raise self._error(
                f"Expected value after operator '{op_token.value}' for field '{field}', "
                f"but got {got}",
                value_token,
            )
        self._advance()

        self.builder.condition(op_token.value, field, self._value(value_token))

    def _parse_in_list(self, field: str) -> None:
        open_paren = self._current()
        if open_paren is None or open_paren.type is not TokenType.LPAREN:
            raise self._error(f"Expected '(' after 'in' for field '{field}'", open_paren)
        self._advance()

        # Values are flat tokens between commas; nested groups are not supported
        values: list[Value] = []
        while (token := self._current()) is not None and token.type is not TokenType.RPAREN:
            if token.type in _VALUE_TOKENS:
                values.append(self._value(token))
            elif token.type is not TokenType.COMMA:
                raise self._error(
                    f"Unsupported value {token.value!r} in 'in' list for field '{field}'",
                    token,
                )
            self._advance()

        if token is None:
            raise self._error(f"Unterminated 'in' list for field '{field}'", token)
        self._advance()
        self.builder.in_(field, values)


class SearchParser:
    """Entry points for tokenizing and parsing filter strings."""

    @staticmethod
    def tokenize(filter_string: str, *, policies: ParserPolicies | None = None) -> list[Token]:
        """Split a filter string into tokens."""
        return tokenize(filter_string, policies)

    @staticmethod
    def parse(filter_string: str, *, policies: ParserPolicies | None = None) -> SearchBuilder:
        """
        Parse a filter string into a SearchBuilder.

        Supports comparison operators (eq, ne, gt, ge, lt, le), logical
        operators (and, or, not), grouping, string functions (contains,
        startswith, endswith), `in` lists and `any` lambdas.

        Args:
            filter_string: The filter expression to parse
            policies: Optional parser policies (quote handling)

        Returns:
            A SearchBuilder holding the parsed clauses

        Raises:
            FilterSyntaxError: If the tokens cannot be recombined into clauses

        Examples:
            >>> SearchParser.parse("name eq 'John' and age gt 30").build()
            "name eq 'John' and age gt 30"

            >>> SearchParser.parse("status in ('Active','Pending')").build()
            "status in ('Active', 'Pending')"
        """
        policies = policies or DEFAULT_POLICIES
        tokens = tokenize(filter_string, policies)
        builder = _Parser(tokens, policies).parse()
        logger.debug(f"Parsed {len(tokens)} tokens into {len(builder)} clauses")
        return builder


def parse(filter_string: str, *, policies: ParserPolicies | None = None) -> SearchBuilder:
    """Parse a filter string into a SearchBuilder. See `SearchParser.parse`."""
    return SearchParser.parse(filter_string, policies=policies)
