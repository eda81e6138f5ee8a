import time

import pytest

from urimatch.expander import expand_template
from urimatch.matcher import match_literal, match_uri
from urimatch.parser import parse_template
from urimatch.template import MatchResult

from rfc_examples import RFC_CASES, RFC_VARIABLES


def params_for(template: str, uri: str):
    result = match_uri(parse_template(template), uri)
    return None if result is None else result.params


class TestMatchUri:
    def test_matches_simple_template(self):
        # Act
        result = match_uri(parse_template("file://foo/{bar}"), "file://foo/hello")

        # Assert
        assert result == MatchResult(template="file://foo/{bar}", params={"bar": "hello"})

    def test_matches_multiple_variables(self):
        assert params_for("api/{version}/users/{id}", "api/v1/users/123") == {
            "version": "v1",
            "id": "123",
        }

    def test_returns_none_for_non_matching_literal(self):
        assert params_for("file://foo/{bar}", "file://baz/hello") is None

    def test_literal_only_template_matches_itself(self):
        assert params_for("api/health", "api/health") == {}

    @pytest.mark.parametrize("uri", ["api/health/", "api/healt", "", "API/health"])
    def test_literal_only_template_rejects_anything_else(self, uri):
        assert params_for("api/health", uri) is None

    def test_empty_template_matches_empty_uri(self):
        assert params_for("", "") == {}
        assert params_for("", "x") is None

    def test_partial_match_is_rejected(self):
        assert params_for("api/{version}", "api/v1/extra") is None

    @pytest.mark.parametrize("uri", ["/api/users/123/extra", "/api/users", "/api/users/"])
    def test_length_mismatch_is_rejected(self, uri):
        assert params_for("/api/users/{id}", uri) is None

    def test_decodes_percent_escapes(self):
        assert params_for("search/{query}", "search/hello%20world") == {
            "query": "hello world"
        }

    def test_decodes_utf8_escapes(self):
        assert params_for("/users/{name}", "/users/Jos%C3%A9") == {"name": "José"}

    def test_accepts_raw_unicode(self):
        assert params_for("/users/{name}", "/users/José") == {"name": "José"}

    def test_invalid_utf8_escape_does_not_match(self):
        assert params_for("/users/{name}", "/users/%FF") is None

    def test_empty_value_between_literals(self):
        assert params_for("api/{version}/test", "api//test") == {"version": ""}

    def test_template_with_only_a_variable(self):
        assert params_for("{id}", "123") == {"id": "123"}
        assert params_for("{id}", "") is None

    def test_prefix_modifier_truncates_value(self):
        assert params_for("api/{name:3}", "api/toolong") == {"name": "too"}
        assert params_for("{name:3}", "toolong") == {"name": "too"}

    def test_prefix_modifier_accepts_shorter_values(self):
        assert params_for("{name:3}", "to") == {"name": "to"}

    def test_consecutive_variables_terminate_with_greedy_split(self):
        assert params_for("api/{version}{format}", "api/v1json") == {
            "version": "v1json",
            "format": "",
        }

    def test_consecutive_variables_recovered_value_reexpands(self):
        # Arrange
        parsed = parse_template("{version}{format}")

        # Act
        result = match_uri(parsed, "v1json")

        # Assert
        assert result is not None
        assert expand_template(parsed, result.params) == "v1json"

    def test_github_style_path(self):
        assert params_for(
            "/repos/{owner}/{repo}/issues/{issue_number}",
            "/repos/octocat/Hello-World/issues/1",
        ) == {"owner": "octocat", "repo": "Hello-World", "issue_number": "1"}

    def test_literal_compared_after_decoding(self):
        assert params_for("/caf%C3%A9/{id}", "/café/7") == {"id": "7"}
        assert params_for("/a~b/{id}", "/a%7Eb/7") == {"id": "7"}

    def test_repeated_variable_keeps_first_occurrence(self):
        assert params_for("/{id}/{id}", "/a/b") == {"id": "a"}

    def test_params_are_fresh_per_call(self):
        # Arrange
        parsed = parse_template("/{id}")

        # Act
        first = match_uri(parsed, "/1")
        first.params["id"] = "changed"
        second = match_uri(parsed, "/1")

        # Assert
        assert second.params == {"id": "1"}


class TestOperatorMatching:
    def test_reserved_expansion_spans_slashes(self):
        assert params_for("/files/{+path}", "/files/docs/readme.txt") == {
            "path": "docs/readme.txt"
        }
        assert params_for("file:///{+path}", "file:///home/user/documents/file.txt") == {
            "path": "home/user/documents/file.txt"
        }

    def test_reserved_expansion_backtracks_to_literal(self):
        assert params_for("{+path}/here", "/foo/bar/here") == {"path": "/foo/bar"}

    def test_fragment_literal(self):
        assert params_for("/page#{section}", "/page#introduction") == {
            "section": "introduction"
        }

    def test_fragment_operator(self):
        assert params_for("/page{#section}", "/page#intro") == {"section": "intro"}

    def test_dot_operator(self):
        assert params_for("/files{.format}", "/files.json") == {"format": "json"}

    def test_optional_operator_expression_may_be_absent(self):
        assert params_for("/files{.format}", "/files") == {}
        assert params_for("/search{?q}", "/search") == {}

    def test_path_segment_operator(self):
        assert params_for("/api{/version}/users", "/api/v1/users") == {"version": "v1"}

    def test_absent_path_segment_before_literal(self):
        assert params_for("{/a}/x", "/x") == {}

    def test_query_parameter(self):
        assert params_for("/search{?q}", "/search?q=test") == {"q": "test"}

    def test_multiple_query_parameters(self):
        assert params_for("/search{?q,limit}", "/search?q=test&limit=10") == {
            "q": "test",
            "limit": "10",
        }

    def test_query_parameters_may_be_skipped(self):
        assert params_for("/search{?q,limit}", "/search?limit=10") == {"limit": "10"}

    def test_unknown_query_parameter_is_rejected(self):
        assert params_for("/search{?q}", "/search?other=1") is None

    def test_last_query_variable_takes_remainder(self):
        assert params_for("/search{?q}", "/search?q=a&b=c") == {"q": "a&b=c"}

    def test_query_continuation(self):
        assert params_for("/search?type=user{&q}", "/search?type=user&q=john") == {
            "q": "john"
        }

    def test_semicolon_parameters(self):
        assert params_for("/api{;version}", "/api;version=v1") == {"version": "v1"}
        assert params_for("{;x,y,empty}", ";x=1024;y=768;empty") == {
            "x": "1024",
            "y": "768",
            "empty": "",
        }

    def test_empty_query_value(self):
        assert params_for("{?x,empty}", "?x=1&empty=") == {"x": "1", "empty": ""}

    def test_unnamed_variable_list_splits_on_comma(self):
        assert params_for("{x,y}", "1024,768") == {"x": "1024", "y": "768"}

    def test_unnamed_last_variable_takes_remainder(self):
        assert params_for("{x,y}", "a,b,c") == {"x": "a", "y": "b,c"}

    def test_unnamed_missing_trailing_variables_are_omitted(self):
        assert params_for("{x,y}", "1024") == {"x": "1024"}

    def test_multi_variable_path_segments(self):
        assert params_for("{/var,x}/here", "/value/1024/here") == {
            "var": "value",
            "x": "1024",
        }


class TestExplodeMatching:
    def test_explode_on_dot_labels(self):
        assert params_for("/tags{.tags*}", "/tags.red.green.blue") == {
            "tags": ["red", "green", "blue"]
        }

    def test_explode_on_path_segments(self):
        assert params_for("{/list*}", "/red/green/blue") == {
            "list": ["red", "green", "blue"]
        }

    def test_explode_simple_list(self):
        assert params_for("{list*}", "a,b%20c") == {"list": ["a", "b c"]}

    def test_explode_query_keeps_raw_pairs(self):
        assert params_for("/search{?filters*}", "/search?color=red&size=large") == {
            "filters": ["color=red", "size=large"]
        }

    def test_explode_with_following_variable(self):
        assert params_for("{/list*,last}", "/a/b/c") == {
            "list": ["a", "b"],
            "last": "c",
        }

    def test_explode_query_defers_to_named_variable(self):
        assert params_for("{?filters*,page}", "?color=red&page=2") == {
            "filters": ["color=red"],
            "page": "2",
        }

    def test_empty_explode_span_is_empty_list(self):
        assert params_for("X{.list*}", "X.") == {"list": []}


class TestMatchLiteral:
    def test_verbatim(self):
        assert match_literal("/a", "/a/b", 0) == 2

    def test_encoded_uri_against_plain_literal(self):
        assert match_literal("~", "%7Ex", 0) == 3

    def test_mismatch(self):
        assert match_literal("/b", "/a", 0) is None

    def test_runs_out_of_input(self):
        assert match_literal("/abc", "/ab", 0) is None


class TestExpansionMatchDuality:
    @pytest.mark.parametrize(
        "value",
        ["plain", "hello world", "a/b?c#d", "50%", "José", "", "x,y"],
    )
    def test_single_expression_round_trip(self, value):
        # Arrange
        parsed = parse_template("/items/{value}/view")

        # Act
        uri = expand_template(parsed, {"value": value})
        result = match_uri(parsed, uri)

        # Assert
        assert result is not None
        assert result.params == {"value": value}

    @pytest.mark.parametrize(
        "template, variables",
        [
            ("/search{?q,limit}", {"q": "a b", "limit": "10"}),
            ("/files{/path*}", {"path": ["usr", "local bin"]}),
            ("{+base}index", {"base": "http://example.com/home/"}),
            ("{;x,y}", {"x": "1024", "y": "768"}),
        ],
    )
    def test_operator_round_trip(self, template, variables):
        # Arrange
        parsed = parse_template(template)

        # Act
        result = match_uri(parsed, expand_template(parsed, variables))

        # Assert
        assert result is not None
        assert result.params == variables


class TestRfcExampleMatching:
    @pytest.mark.parametrize("template, uri", RFC_CASES)
    def test_rfc_expansion_matches_back(self, template, uri):
        # Arrange
        parsed = parse_template(template)
        assert expand_template(parsed, RFC_VARIABLES) == uri

        # Act
        result = match_uri(parsed, uri)

        # Assert
        assert result is not None
        assert result.template == template


class TestSearchCost:
    @pytest.mark.parametrize(
        "template, uri",
        [
            ("{a}{b}{c}{d}x", "a" * 120),
            ("/r/{a}{b}{c}.x", "/r/" + "a" * 300),
            ("{a}{b}{c}{d}{e}/end", "a" * 200),
        ],
    )
    def test_adjacent_expressions_fail_fast_on_long_uri(self, template, uri):
        # Arrange
        parsed = parse_template(template)
        started = time.monotonic()

        # Act
        result = match_uri(parsed, uri)

        # Assert
        assert result is None
        assert time.monotonic() - started < 2.0

    def test_adjacent_expressions_still_match_long_uri(self):
        # Arrange
        parsed = parse_template("/r/{a}{b}{c}.x")
        uri = "/r/" + "a" * 300 + ".x"

        # Act
        result = match_uri(parsed, uri)

        # Assert
        assert result is not None
        assert result.params == {"a": "a" * 300, "b": "", "c": ""}
