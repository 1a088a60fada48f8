"""
Build and parse OData-style `$filter` expressions.

Example:
    from odata_search import SearchBuilder, parse

    query = SearchBuilder().eq("name", "John").and_().gt("age", 18).build()
    # "name eq 'John' and age gt 18"

    builder = parse("status in ('active', 'pending')")
    builder.and_().contains("name", "Smith").build()
    # "status in ('active', 'pending') and contains(name, 'Smith')"
"""

from __future__ import annotations

from . import clauses
from .builder import SearchBuilder
from .exceptions import (
    FilterArgumentError,
    FilterSyntaxError,
    InvalidOperatorError,
    ODataSearchError,
)
from .operators import AnyOptions, Operator
from .parser import FunctionCall, LambdaCall, SearchParser, parse
from .policies import ParserPolicies, QuotePolicy
from .tokenizer import Token, Tokenizer, TokenType, tokenize
from .values import RawToken, Value, format_value, parse_value

__version__ = "1.0.0"

__all__ = [
    "AnyOptions",
    "FilterArgumentError",
    "FilterSyntaxError",
    "FunctionCall",
    "InvalidOperatorError",
    "LambdaCall",
    "ODataSearchError",
    "Operator",
    "ParserPolicies",
    "QuotePolicy",
    "RawToken",
    "SearchBuilder",
    "SearchParser",
    "Token",
    "TokenType",
    "Tokenizer",
    "Value",
    "clauses",
    "format_value",
    "parse",
    "parse_value",
    "tokenize",
]
