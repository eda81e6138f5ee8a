"""Ordered template registry with first-match-wins lookup."""

import logging

from urimatch.matcher import match_uri
from urimatch.parser import parse_template
from urimatch.template import MatchResult, ParsedTemplate


class UriTemplateMatcher:
    """Holds parsed templates and matches URIs against them in insertion order.

    Usage::

        matcher = UriTemplateMatcher()
        matcher.add("api/{version}/users")
        matcher.add("api/{resource}")
        matcher.match("api/v1/users")
        # MatchResult(template="api/{version}/users", params={"version": "v1"})

    There is no ranking by specificity: register the more specific template
    first. Adding templates is not synchronized; matching only reads.
    """

    def __init__(self) -> None:
        self._templates: dict[str, ParsedTemplate] = {}
        self.logger = logging.getLogger("urimatch.registry")

    def add(self, template: str) -> ParsedTemplate:
        """Parse and register a template.

        Adding a template that is already registered keeps its original
        position.

        Args:
            template: RFC 6570 template. ``""`` is valid and matches only ``""``.

        Returns:
            ParsedTemplate: The parsed form of the template.

        Raises:
            TypeError: If the template is not a string.
            ValueError: If the template is non-empty but only whitespace.
            TemplateSyntaxError: If the template is malformed.
        """
        if not isinstance(template, str):
            raise TypeError("Template must be a string")
        if template and not template.strip():
            raise ValueError("Template cannot be empty")

        if template in self._templates:
            self.logger.debug(f"Template already registered: '{template}'")
            return self._templates[template]

        parsed = parse_template(template)
        self._templates[template] = parsed
        self.logger.debug(f"Registered template '{template}'")
        return parsed

    def remove(self, template: str) -> None:
        """Remove a template if it is registered."""
        if self._templates.pop(template, None) is not None:
            self.logger.debug(f"Removed template '{template}'")

    def match(self, uri: str) -> MatchResult | None:
        """Return the first registered template's match for the URI.

        Raises:
            TypeError: If the URI is not a string.
        """
        if not isinstance(uri, str):
            raise TypeError("URI must be a string")

        for parsed in self._templates.values():
            result = match_uri(parsed, uri)
            if result is not None:
                return result

        self.logger.debug(f"No template matches '{uri}'")
        return None

    def clear(self) -> None:
        """Remove all templates."""
        self._templates.clear()
        self.logger.debug("Cleared all templates")

    def all(self) -> list[str]:
        """Return the registered template strings in insertion order."""
        return list(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, template: object) -> bool:
        return template in self._templates
