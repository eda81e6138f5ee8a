"""RFC 6570 template parser.

Turns a template string into a ParsedTemplate with one left-to-right scan.
The scanner is a two-state machine (literal text / inside ``{...}``) and
does not use regular expressions.
"""

from __future__ import annotations

from urimatch.errors import (
    EmptyExpression,
    EmptyVariableName,
    InvalidPrefixLength,
    UnclosedExpression,
)
from urimatch.operators import MAX_PREFIX_LENGTH, Operator
from urimatch.template import Expression, Literal, ParsedTemplate, Part, VarSpec

_DIGITS = frozenset("0123456789")


def parse_template(template: str) -> ParsedTemplate:
    """Parse a URI template.

    Examples::

        "api/health"        -> [Literal("api/health")]
        "file://foo/{bar}"  -> [Literal("file://foo/"), Expression(NONE, [bar])]
        "{/list*}{?q,n:3}"  -> [Expression(SLASH, [list*]),
                                Expression(QUESTION, [q, n:3])]

    Args:
        template: RFC 6570 template text.

    Returns:
        ParsedTemplate: Immutable parts. ``""`` parses to a single empty literal.

    Raises:
        UnclosedExpression: A ``{`` is not closed before the next ``{`` or the end.
        EmptyExpression: The template contains ``{}``.
        EmptyVariableName: A variable token has no name.
        InvalidPrefixLength: A ``:N`` modifier is not a decimal in 1..9999.
    """
    parts: list[Part] = []
    literal: list[str] = []
    body: list[str] = []
    in_expression = False
    opened_at = 0

    for position, char in enumerate(template):
        if not in_expression:
            if char == "{":
                if literal:
                    parts.append(Literal("".join(literal)))
                    literal = []
                in_expression = True
                opened_at = position
            else:
                literal.append(char)
        elif char == "}":
            parts.append(_parse_expression("".join(body), template, opened_at))
            body = []
            in_expression = False
        elif char == "{":
            raise UnclosedExpression("Unclosed expression", template, opened_at)
        else:
            body.append(char)

    if in_expression:
        raise UnclosedExpression("Unclosed expression", template, opened_at)

    if literal or not parts:
        parts.append(Literal("".join(literal)))

    return ParsedTemplate(template=template, parts=tuple(parts))


def _parse_expression(body: str, template: str, position: int) -> Expression:
    """Parse the text between ``{`` and ``}``."""
    if not body:
        raise EmptyExpression("Empty expression", template, position)

    operator = Operator.from_char(body[0])
    if operator is None:
        operator = Operator.NONE
    else:
        body = body[1:]

    variables = tuple(
        _parse_varspec(token, template, position) for token in body.split(",")
    )
    return Expression(operator=operator, variables=variables)


def _parse_varspec(token: str, template: str, position: int) -> VarSpec:
    """Parse ``name``, ``name:N`` or ``name*``."""
    if ":" in token:
        name, digits = token.split(":", 1)
        if not name:
            raise EmptyVariableName("Empty variable name", template, position)
        # explode and prefix are mutually exclusive in either order
        if name.endswith("*") or not digits or not set(digits) <= _DIGITS:
            raise InvalidPrefixLength(
                f"Invalid prefix length {digits!r} for {name!r}", template, position
            )
        prefix = int(digits)
        if not (1 <= prefix <= MAX_PREFIX_LENGTH):
            raise InvalidPrefixLength(
                f"Invalid prefix length {digits!r} for {name!r}", template, position
            )
        return VarSpec(name=name, prefix=prefix)

    if token.endswith("*"):
        name = token[:-1]
        if not name:
            raise EmptyVariableName("Empty variable name", template, position)
        return VarSpec(name=name, explode=True)

    if not token:
        raise EmptyVariableName("Empty variable name", template, position)
    return VarSpec(name=token)
