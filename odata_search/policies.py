"""
Parser policies (behavioral switches for tokenizing and value parsing).

Policies are passed explicitly to `parse()` / `tokenize()`; there is no global
configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class QuotePolicy(Enum):
    """How a doubled single quote inside a string literal is read."""

    # `''` inside a literal is an escaped quote and collapses to `'`.
    DOUBLED = "doubled"
    # The first `'` after the opening quote terminates the literal and the
    # interior is kept as-is (`'O''Brien'` reads as `'O'` then `'Brien'`).
    LITERAL = "literal"


@dataclass(frozen=True, slots=True)
class ParserPolicies:
    """Policy bundle applied to a single parse or tokenize call."""

    quotes: QuotePolicy = QuotePolicy.DOUBLED


DEFAULT_POLICIES = ParserPolicies()
