"""Tests for parsing filter strings back into SearchBuilder instances."""

from __future__ import annotations

import logging

import pytest

from odata_search import (
    FilterSyntaxError,
    ParserPolicies,
    QuotePolicy,
    SearchBuilder,
    SearchParser,
    parse,
)
from odata_search.parser import split_function_call
from odata_search.tokenizer import Token, TokenType

# =============================================================================
# Round trips
# =============================================================================


class TestRoundTrip:
    """`parse(s).build()` reproduces `s` for canonical input."""

    @pytest.mark.req("PARSE-RT-001")
    @pytest.mark.parametrize(
        "text",
        [
            "name eq 'John' and age gt 30",
            "(firstName eq 'John' or firstName eq 'Jane') and age ge 25",
            "contains(department, 'Sales')",
            "startswith(name, 'J') or endswith(email, 'example.com')",
            "status in ('Active', 'Pending', 'Review')",
            "id in (1, 2, 3)",
            "not (status eq 'inactive')",
            "not status eq 'inactive'",
            "((a eq 1 or b eq 2) and (c ne 'x'))",
            "active eq true",
            "createdDate gt 2023-01-01T00:00:00.000Z",
            "manager eq otherField",
            "name eq 'O''Brien'",
            "title eq 'war and peace (novel)'",
            "(tags/any(x:(x eq 'v')))",
            "(tags/any(x:(contains(x, 'elec')))) and price lt 100",
            "a eq 1 and a ne -2 and b le 3.5",
            "name eq ''",
            "id in ()",
        ],
    )
    def test_canonical_text_round_trips(self, text: str) -> None:
        assert parse(text).build() == text

    @pytest.mark.req("PARSE-RT-001")
    def test_builder_output_round_trips(self) -> None:
        builder = (
            SearchBuilder()
            .open_group()
            .eq("a", "it's")
            .or_()
            .in_("b", ["x", "y'z", 3])
            .close_group()
            .and_()
            .not_()
            .contains("c", "(d, e)")
            .and_()
            .any("tags", {"operator": "ne", "value": "O'Neil"})
        )
        assert parse(builder.build()) == builder


class TestNormalization:
    """Input is reproduced up to value formatting and whitespace."""

    @pytest.mark.req("PARSE-RT-002")
    def test_in_list_without_spaces(self) -> None:
        assert parse("status in ('Active','Pending')").build() == "status in ('Active', 'Pending')"

    @pytest.mark.req("PARSE-RT-002")
    def test_whitespace_collapses(self) -> None:
        assert parse("  a   eq   1\tand  ( b eq 2 )  ").build() == "a eq 1 and (b eq 2)"

    @pytest.mark.req("PARSE-RT-002")
    def test_numbers_are_canonical(self) -> None:
        assert parse("price le 10.50").build() == "price le 10.5"
        assert parse("n eq +7").build() == "n eq 7"

    @pytest.mark.req("PARSE-RT-002")
    def test_double_quoted_string_becomes_single_quoted(self) -> None:
        assert parse('name eq "John"').build() == "name eq 'John'"

    @pytest.mark.req("PARSE-RT-002")
    def test_function_spacing(self) -> None:
        assert parse("contains( department ,'Sales' )").build() == "contains(department, 'Sales')"

    @pytest.mark.req("PARSE-RT-002")
    def test_bare_lambda_gains_wrapping_and_variable(self) -> None:
        result = parse("tags/any(y: contains(y, 'a'))").build()
        assert result == "(tags/any(x:(contains(x, 'a'))))"

    @pytest.mark.req("PARSE-RT-002")
    def test_function_value_keeps_commas(self) -> None:
        """Everything after the first comma is the value."""
        assert parse("contains(title, 'a, b')").build() == "contains(title, 'a, b')"


# =============================================================================
# Scenarios
# =============================================================================


def test_parse_and_extend() -> None:
    """A parsed builder can be extended like any other."""
    builder = parse("a eq 'x'")
    assert builder.and_().contains("d", "Sales").build() == "a eq 'x' and contains(d, 'Sales')"


def test_parse_returns_new_builder_each_time() -> None:
    first = parse("a eq 1")
    second = parse("a eq 1")
    first.and_()
    assert second.build() == "a eq 1"


def test_parse_clauses_structure() -> None:
    builder = parse("(a eq 'x' or a eq 'y') and n ge 1")
    assert builder.parts == ("(", "a eq 'x'", "or", "a eq 'y'", ")", "and", "n ge 1")


def test_parse_values_are_typed() -> None:
    builder = parse("id in (1, 'one', true)")
    assert builder.parts == ("id in (1, 'one', true)",)


def test_parse_empty_input_gives_empty_builder() -> None:
    assert parse("").build() == ""
    assert len(parse("   ")) == 0


def test_parse_unbalanced_groups_are_not_checked() -> None:
    assert parse("(a eq 1").build() == "(a eq 1"
    assert parse("a eq 1))").build() == "a eq 1))"


def test_search_parser_class_entry_point() -> None:
    assert SearchParser.parse("a eq 1") == parse("a eq 1")


def test_parse_logs_debug(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="odata_search"):
        parse("a eq 1 and contains(b, 'c')")
    assert any("clauses" in record.getMessage() for record in caplog.records)


# =============================================================================
# Quote policies
# =============================================================================


def test_doubled_quote_is_one_value_by_default() -> None:
    builder = parse("name eq 'O''Brien'")
    assert builder.parts == ("name eq 'O''Brien'",)


def test_literal_quote_policy_splits_doubled_quote() -> None:
    """Legacy scanning reads `'O''Brien'` as two literals, which cannot be recombined."""
    policies = ParserPolicies(quotes=QuotePolicy.LITERAL)
    with pytest.raises(FilterSyntaxError) as exc_info:
        parse("name eq 'O''Brien'", policies=policies)
    assert exc_info.value.token == "'Brien'"
    assert exc_info.value.index == 3


def test_literal_quote_policy_parses_plain_strings() -> None:
    policies = ParserPolicies(quotes=QuotePolicy.LITERAL)
    assert parse("name eq 'John'", policies=policies).build() == "name eq 'John'"


# =============================================================================
# Errors
# =============================================================================


def test_missing_operator() -> None:
    with pytest.raises(FilterSyntaxError, match="Expected operator after field 'name'") as exc_info:
        parse("name")
    assert exc_info.value.token is None
    assert exc_info.value.index == 1


def test_missing_value() -> None:
    with pytest.raises(FilterSyntaxError, match="Expected value after operator 'eq'") as exc_info:
        parse("name eq")
    assert exc_info.value.index == 2


def test_keyword_in_value_position() -> None:
    with pytest.raises(FilterSyntaxError) as exc_info:
        parse("name eq and b eq 1")
    assert exc_info.value.token == "and"
    assert exc_info.value.index == 2


def test_unsupported_operator() -> None:
    with pytest.raises(FilterSyntaxError, match="Unsupported operator 'foo'") as exc_info:
        parse("age foo 3")
    assert exc_info.value.token == "foo"
    assert exc_info.value.index == 1
    assert exc_info.value.position == 4


def test_in_requires_open_paren() -> None:
    with pytest.raises(FilterSyntaxError, match=r"Expected '\(' after 'in'") as exc_info:
        parse("status in 'a'")
    assert exc_info.value.token == "'a'"
    assert exc_info.value.index == 2


def test_in_at_end_of_input() -> None:
    with pytest.raises(FilterSyntaxError, match=r"Expected '\(' after 'in'"):
        parse("status in")


def test_unterminated_in_list() -> None:
    with pytest.raises(FilterSyntaxError, match="Unterminated 'in' list") as exc_info:
        parse("status in ('a', 'b'")
    assert exc_info.value.index == 6


def test_nested_group_in_in_list() -> None:
    with pytest.raises(FilterSyntaxError, match="in' list") as exc_info:
        parse("status in ('a', ('b'))")
    assert exc_info.value.token == "("
    assert exc_info.value.index == 5


def test_comparison_keyword_as_field() -> None:
    with pytest.raises(FilterSyntaxError, match="Expected field name") as exc_info:
        parse("eq 5")
    assert exc_info.value.index == 0


def test_stray_comma() -> None:
    with pytest.raises(FilterSyntaxError, match="Expected field name"):
        parse("a eq 1 , b eq 2")


def test_function_without_value() -> None:
    with pytest.raises(FilterSyntaxError, match=r"contains\(field, value\)"):
        parse("contains(name)")


def test_lambda_body_must_use_variable() -> None:
    with pytest.raises(FilterSyntaxError, match="must test 'x'"):
        parse("tags/any(x:y eq 1)")


def test_lambda_body_must_be_single_condition() -> None:
    with pytest.raises(FilterSyntaxError, match="single condition"):
        parse("(tags/any(x:(x eq 1 and x eq 2)))")
    with pytest.raises(FilterSyntaxError, match="single condition"):
        parse("tags/any(x:x in (1, 2))")


def test_syntax_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        parse("name")


def test_split_function_call_record() -> None:
    token = Token(TokenType.FUNCTION, "endswith(email, 'a,b.com')", 0)
    call = split_function_call(token, 0)
    assert call.name == "endswith"
    assert call.field == "email"
    assert call.raw_value == "'a,b.com'"


def test_overflowing_numbers_round_trip_as_text() -> None:
    """Numbers with no finite Python form come back exactly as written."""
    assert parse("x eq 1e400").build() == "x eq 1e400"
    huge = "9" * 5000
    assert parse(f"x eq {huge}").build() == f"x eq {huge}"
    assert parse("x in (1, -1e999)").build() == "x in (1, -1e999)"
