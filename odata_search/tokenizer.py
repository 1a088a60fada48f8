"""
Tokenizer for OData-style filter strings.

Splits filter text into a flat list of tokens in one left-to-right scan. At
each position the first matching rule wins:

1. `contains` / `startswith` / `endswith` followed by `(` -> one FUNCTION
   token spanning the whole call, including its parentheses
2. a lambda `(field/any(x:(...)))` or `field/any(x:(...))` -> one LAMBDA token
3. whole-word keyword (`and or not in eq ne gt ge lt le`) -> keyword token
4. `(`, `)`, `,` -> LPAREN, RPAREN, COMMA
5. `'...'` -> STRING, quoting preserved
6. anything else up to whitespace, a paren or a comma -> BARE

The tokenizer only segments text. Malformed input (an unterminated quote, a
stray character) ends up in a BARE token and is left for the parser to judge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

from .policies import DEFAULT_POLICIES, ParserPolicies, QuotePolicy

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Token types produced by the tokenizer."""

    AND = auto()  # and
    OR = auto()  # or
    NOT = auto()  # not
    IN = auto()  # in
    COMPARISON = auto()  # eq, ne, gt, lt, ge, le
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    COMMA = auto()  # ,
    STRING = auto()  # 'quoted literal'
    FUNCTION = auto()  # contains(field, value)
    LAMBDA = auto()  # (field/any(x:(x eq value)))
    BARE = auto()  # field name, number or unquoted literal


@dataclass(frozen=True)
class Token:
    """A token from the filter string."""

    type: TokenType
    value: str
    pos: int  # Position in original string for error messages


KEYWORDS: dict[str, TokenType] = {
    "and": TokenType.AND,
    "or": TokenType.OR,
    "not": TokenType.NOT,
    "in": TokenType.IN,
    "eq": TokenType.COMPARISON,
    "ne": TokenType.COMPARISON,
    "gt": TokenType.COMPARISON,
    "lt": TokenType.COMPARISON,
    "ge": TokenType.COMPARISON,
    "le": TokenType.COMPARISON,
}

FUNCTION_NAMES = frozenset(["contains", "startswith", "endswith"])

LAMBDA_SUFFIX = "/any"

_QUOTE_CHARS = "'\""
# Characters that end a bare word
_WORD_STOP = "(),"


class Tokenizer:
    """Tokenizer for filter strings."""

    def __init__(self, text: str, policies: ParserPolicies | None = None):
        self.text = text
        self.policies = policies or DEFAULT_POLICIES
        self.pos = 0
        self.length = len(text)

    def _skip_whitespace(self) -> None:
        """Skip whitespace characters."""
        while self.pos < self.length and self.text[self.pos].isspace():
            self.pos += 1

    def _next_non_space(self, pos: int) -> int:
        while pos < self.length and self.text[pos].isspace():
            pos += 1
        return pos

    def _word_end(self, pos: int) -> int:
        """Return the end offset of the bare word starting at `pos`."""
        while pos < self.length:
            ch = self.text[pos]
            if ch.isspace() or ch in _WORD_STOP:
                break
            pos += 1
        return pos

    def _quoted_end(self, pos: int) -> int | None:
        """
        Return the offset just past the single-quoted literal opening at `pos`.

        Returns None if the literal is never closed.
        """
        i = pos + 1
        while i < self.length:
            if self.text[i] == "'":
                doubled = i + 1 < self.length and self.text[i + 1] == "'"
                if doubled and self.policies.quotes is QuotePolicy.DOUBLED:
                    i += 2
                    continue
                return i + 1
            i += 1
        return None

    def _balanced_end(self, pos: int) -> int | None:
        """
        Return the offset just past the `)` matching the `(` at `pos`.

        Quoted text inside the span is skipped, so parentheses and commas in
        string arguments do not count. Returns None if the span never closes.
        """
        depth = 0
        quote: str | None = None
        i = pos
        while i < self.length:
            ch = self.text[i]
            if quote is not None:
                if ch == quote:
                    quote = None
            elif ch in _QUOTE_CHARS:
                quote = ch
            elif ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    return i + 1
            i += 1
        return None

    def _lambda_end(self, pos: int) -> int | None:
        """
        Return the end offset of a lambda call starting at `pos`, if any.

        `pos` points at the collection field, e.g. the `t` of `tags/any(...)`.
        """
        word_end = self._word_end(pos)
        word = self.text[pos:word_end]
        if len(word) <= len(LAMBDA_SUFFIX) or not word.endswith(LAMBDA_SUFFIX):
            return None
        if word_end >= self.length or self.text[word_end] != "(":
            return None
        return self._balanced_end(word_end)

    def _wrapped_lambda_end(self, pos: int) -> int | None:
        """Return the end of `(field/any(...))` when `pos` is its outer `(`."""
        inner_end = self._lambda_end(self._next_non_space(pos + 1))
        if inner_end is None:
            return None
        close = self._next_non_space(inner_end)
        if close < self.length and self.text[close] == ")":
            return close + 1
        return None

    def _emit(self, tokens: list[Token], token_type: TokenType, start: int, end: int) -> None:
        tokens.append(Token(token_type, self.text[start:end], start))
        self.pos = end

    def tokenize(self) -> list[Token]:
        """Tokenize the entire filter string."""
        tokens: list[Token] = []

        while True:
            self._skip_whitespace()
            if self.pos >= self.length:
                break

            ch = self.text[self.pos]
            start = self.pos

            if ch == "(":
                end = self._wrapped_lambda_end(start)
                if end is not None:
                    self._emit(tokens, TokenType.LAMBDA, start, end)
                else:
                    self._emit(tokens, TokenType.LPAREN, start, start + 1)
            elif ch == ")":
                self._emit(tokens, TokenType.RPAREN, start, start + 1)
            elif ch == ",":
                self._emit(tokens, TokenType.COMMA, start, start + 1)
            elif ch == "'" and (end := self._quoted_end(start)) is not None:
                self._emit(tokens, TokenType.STRING, start, end)
            else:
                self._read_word(tokens, start)

        logger.debug(f"Tokenized filter into {len(tokens)} tokens")
        return tokens

    def _read_word(self, tokens: list[Token], start: int) -> None:
        """Classify the bare word at `start` as function, lambda, keyword or BARE."""
        word_end = self._word_end(start)
        word = self.text[start:word_end]

        if word in FUNCTION_NAMES:
            paren = self._next_non_space(word_end)
            if paren < self.length and self.text[paren] == "(":
                end = self._balanced_end(paren)
                if end is not None:
                    self._emit(tokens, TokenType.FUNCTION, start, end)
                    return

        end = self._lambda_end(start)
        if end is not None:
            self._emit(tokens, TokenType.LAMBDA, start, end)
            return

        self._emit(tokens, KEYWORDS.get(word, TokenType.BARE), start, word_end)


def tokenize(text: str, policies: ParserPolicies | None = None) -> list[Token]:
    """Split filter text into tokens."""
    return Tokenizer(text, policies).tokenize()
