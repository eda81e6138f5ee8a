"""Inverse matching: recover variable values from a concrete URI.

Expansion is deterministic, matching is not. Two adjacent expressions, or
an operator whose characters overlap the next literal, leave the split
point open. The matcher runs a depth-first search over the template parts.
Each expression tries its candidate end positions longest first and keeps
the first one that lets the rest of the template consume the whole URI.

Candidate ends are filtered by the part that follows: a literal must
match right there, and the final part must end the URI. Its depth is
bounded by the number of parts. Every ``(part, position)`` pair that fails
is remembered for the rest of the call, so adjacent expressions cost
O(parts * n^2) on a URI of length n instead of growing with their count.
"""

from __future__ import annotations

from collections.abc import Iterator

from urimatch.encoding import decoded_bytes, is_pct_triplet, next_unit, pct_decode
from urimatch.operators import OPERATORS, OperatorSpec
from urimatch.template import (
    Expression,
    Literal,
    MatchResult,
    MatchValue,
    ParsedTemplate,
    Part,
    VarSpec,
)

Params = dict[str, MatchValue]


def match_uri(parsed: ParsedTemplate, uri: str) -> MatchResult | None:
    """Match a URI against a parsed template.

    Examples::

        match_uri(parse_template("search/{query}"), "search/hello%20world")
        # MatchResult(template="search/{query}", params={"query": "hello world"})

        match_uri(parse_template("/api/users/{id}"), "/api/users/1/extra")
        # None

    Returns:
        MatchResult with decoded values, or None when no assignment of
        variables reproduces the whole URI.
    """
    params = _match_parts(parsed.parts, 0, uri, 0, set())
    if params is None:
        return None
    return MatchResult(template=parsed.template, params=params)


def match_literal(text: str, uri: str, pos: int) -> int | None:
    """Match literal template text at ``uri[pos:]``.

    Tries a verbatim comparison first, then compares both sides
    percent-decoded, so ``%7E`` in the template matches ``~`` in the URI.

    Returns:
        Index just past the literal in ``uri``, or None.
    """
    if uri.startswith(text, pos):
        return pos + len(text)

    expected = decoded_bytes(text)
    consumed = bytearray()
    index = pos
    while len(consumed) < len(expected):
        if index >= len(uri):
            return None
        unit, index = next_unit(uri, index)
        consumed += unit
        if not expected.startswith(consumed):
            return None
    return index


def _match_parts(
    parts: tuple[Part, ...],
    index: int,
    uri: str,
    pos: int,
    failed: set[tuple[int, int]],
) -> Params | None:
    """Match ``parts[index:]`` against ``uri[pos:]``; None if impossible.

    The outcome depends only on ``(index, pos)``, so positions already
    known to fail are recorded in ``failed`` and never searched twice.
    """
    while index < len(parts) and isinstance(parts[index], Literal):
        end = match_literal(parts[index].text, uri, pos)
        if end is None:
            return None
        index, pos = index + 1, end

    if index == len(parts):
        return {} if pos == len(uri) else None

    if (index, pos) in failed:
        return None

    expression = parts[index]
    spec = OPERATORS[expression.operator]
    for start, end in _expression_spans(parts, index, uri, pos):
        rest = _match_parts(parts, index + 1, uri, end, failed)
        if rest is None:
            continue
        if start is None:
            values: Params = {}
        else:
            values = _split_span(expression, spec, uri[start:end])
            if values is None:
                continue
        # first occurrence of a repeated name wins
        for name, value in rest.items():
            values.setdefault(name, value)
        return values

    failed.add((index, pos))
    return None


def _expression_spans(
    parts: tuple[Part, ...], index: int, uri: str, pos: int
) -> Iterator[tuple[int | None, int]]:
    """Yield ``(start, end)`` spans for an expression, longest first.

    ``start`` is None for the option where the expression expanded to
    nothing and left no leading char behind.
    """
    expression = parts[index]
    spec = OPERATORS[expression.operator]
    following = parts[index + 1] if index + 1 < len(parts) else None

    if spec.first and not uri.startswith(spec.first, pos):
        yield None, pos
        return

    start = pos + len(spec.first)
    # A trailing expression with no leading char must consume something,
    # unless it shares its span with the expression before it.
    required = (
        not spec.first
        and following is None
        and not (index > 0 and isinstance(parts[index - 1], Expression))
    )

    for end in reversed(_span_boundaries(uri, start, spec)):
        if required and end == start:
            continue
        if _can_follow(following, uri, end):
            yield start, end

    if spec.first:
        yield None, pos


def _span_boundaries(uri: str, start: int, spec: OperatorSpec) -> list[int]:
    """Positions where an expression's span may end, in ascending order.

    The span is the longest run of characters the operator can produce.
    Boundaries never fall inside a ``%XX`` escape.
    """
    allowed = spec.matchable
    boundaries = [start]
    index = start
    while index < len(uri):
        char = uri[index]
        if char == "%":
            if not is_pct_triplet(uri, index):
                break
            index += 3
        elif char in allowed or ord(char) > 127:
            index += 1
        else:
            break
        boundaries.append(index)
    return boundaries


def _can_follow(following: Part | None, uri: str, end: int) -> bool:
    if following is None:
        return end == len(uri)
    if isinstance(following, Literal):
        return match_literal(following.text, uri, end) is not None
    return True


def _split_span(
    expression: Expression, spec: OperatorSpec, span: str
) -> Params | None:
    """Assign an expression's span to its variables, or None if it can't be."""
    try:
        if spec.named:
            return _split_named(expression.variables, spec, span)
        return _split_unnamed(expression.variables, spec, span)
    except UnicodeDecodeError:
        return None


def _split_unnamed(
    variables: tuple[VarSpec, ...], spec: OperatorSpec, span: str
) -> Params:
    """Positional split. The last variable takes the remainder."""
    segments = span.split(spec.sep)
    values: Params = {}
    taken = 0
    for position, var in enumerate(variables):
        if taken >= len(segments):
            break
        after = len(variables) - position - 1
        if var.explode:
            count = max(1, len(segments) - taken - after)
            chunk = segments[taken : taken + count]
            values[var.name] = _decode_list(chunk)
            taken += count
        elif after == 0:
            values[var.name] = _decode_scalar(var, spec.sep.join(segments[taken:]))
            taken = len(segments)
        else:
            values[var.name] = _decode_scalar(var, segments[taken])
            taken += 1
    return values


def _split_named(
    variables: tuple[VarSpec, ...], spec: OperatorSpec, span: str
) -> Params | None:
    """Split ``name=value`` segments, assigning each by name in declared order.

    Exploded variables keep their raw ``key=value`` segments, since the
    original list or mapping shape can't be told apart in the URI.
    """
    segments = span.split(spec.sep) if span else []
    raw_values: dict[str, str] = {}
    exploded: dict[str, list[str]] = {}
    current = 0
    last_assigned: VarSpec | None = None

    for segment in segments:
        key, _, raw = segment.partition("=")
        while current < len(variables):
            var = variables[current]
            if var.explode:
                if any(
                    not later.explode and later.name == key
                    for later in variables[current + 1 :]
                ):
                    current += 1
                    continue
                exploded.setdefault(var.name, []).append(segment)
                last_assigned = var
                break
            if var.name == key:
                raw_values[var.name] = raw
                last_assigned = var
                current += 1
                break
            current += 1
        else:
            if last_assigned is None or last_assigned is not variables[-1]:
                return None
            if last_assigned.explode:
                return None
            raw_values[last_assigned.name] += spec.sep + segment

    values: Params = {}
    for var in variables:
        if var.name in raw_values:
            values[var.name] = _decode_scalar(var, raw_values[var.name])
        elif var.name in exploded:
            values[var.name] = _decode_list(exploded[var.name])
    return values


def _decode_scalar(var: VarSpec, raw: str) -> str:
    value = pct_decode(raw)
    if var.prefix is not None:
        return value[: var.prefix]
    return value


def _decode_list(chunk: list[str]) -> list[str]:
    if chunk == [""]:
        return []
    return [pct_decode(segment) for segment in chunk]
