"""Exception hierarchy for URI template processing.

Only template parsing raises. A URI that does not match a template is an
ordinary outcome and is reported as ``None`` by the matcher.
"""

from __future__ import annotations


class UriTemplateError(Exception):
    """Base exception for all urimatch errors."""

    pass


class TemplateSyntaxError(UriTemplateError):
    """Raised when a template string is not valid RFC 6570 syntax.

    Carries the offending template and the 0-based position of the
    expression that failed, so callers can point at the problem.
    """

    def __init__(self, message: str, template: str, position: int) -> None:
        super().__init__(f"{message} at position {position} in {template!r}")
        self.template = template
        self.position = position


class UnclosedExpression(TemplateSyntaxError):
    """Raised when a ``{`` has no matching ``}``."""

    pass


class EmptyExpression(TemplateSyntaxError):
    """Raised for an empty ``{}`` block."""

    pass


class EmptyVariableName(TemplateSyntaxError):
    """Raised when a variable token has no name before ``:``, ``*`` or ``,``."""

    pass


class InvalidPrefixLength(TemplateSyntaxError):
    """Raised when a ``:N`` prefix is not a decimal integer in 1..9999.

    This includes combining a prefix with the explode modifier.
    """

    pass
