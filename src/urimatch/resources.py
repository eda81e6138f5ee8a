"""MCP resource templates backed by RFC 6570 matching.

A server advertises resource templates like ``file:///logs/{date}.log`` and
reads URIs that fall under them. ResourceTemplate is the wire model.
ResourceTemplateManager routes a URI to the handler of the first template
that matches it and passes the recovered variables along.
"""

import logging
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from urimatch.errors import TemplateSyntaxError
from urimatch.expander import expand_template
from urimatch.matcher import match_uri
from urimatch.parser import parse_template
from urimatch.registry import UriTemplateMatcher
from urimatch.template import MatchResult, MatchValue, ParsedTemplate

# (uri, params) -> resource contents
TemplateHandler = Callable[[str, dict[str, MatchValue]], Awaitable[Any]]


class ResourceTemplate(BaseModel):
    """
    A template describing a family of resources a server can read.

    The URI template is validated on construction, so a malformed template
    never reaches the registry.
    """

    model_config = ConfigDict(populate_by_name=True)

    uri_template: str = Field(alias="uriTemplate")
    """
    RFC 6570 template that URIs of this resource family expand from.
    """

    name: str
    """
    Programmatic name of the template.
    """

    title: str | None = None
    """
    Human-readable display name.
    """

    description: str | None = None
    """
    What the resources behind this template contain.
    """

    mime_type: str | None = Field(default=None, alias="mimeType")
    """
    Content type shared by all matching resources, when known.
    """

    _parsed: ParsedTemplate | None = PrivateAttr(default=None)

    @field_validator("uri_template")
    @classmethod
    def validate_uri_template(cls, v: str) -> str:
        try:
            parse_template(v)
        except TemplateSyntaxError as e:
            raise ValueError(str(e)) from e
        return v

    @property
    def parsed(self) -> ParsedTemplate:
        if self._parsed is None or self._parsed.template != self.uri_template:
            self._parsed = parse_template(self.uri_template)
        return self._parsed

    def expand(self, variables: dict[str, Any] | None = None) -> str:
        """Build a concrete resource URI from this template."""
        return expand_template(self.parsed, variables or {})

    def match(self, uri: str) -> MatchResult | None:
        """Recover template variables from a resource URI."""
        return match_uri(self.parsed, uri)

    def to_protocol(self) -> dict[str, Any]:
        """Serialize to the camelCase wire format, dropping unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    @classmethod
    def from_protocol(cls, data: dict[str, Any]) -> "ResourceTemplate":
        return cls.model_validate(data)


class ResourceTemplateManager:
    """Routes resource reads to template handlers.

    Templates are tried in registration order and the first match wins.
    """

    def __init__(self) -> None:
        self.registered_templates: dict[str, ResourceTemplate] = {}
        self.template_handlers: dict[str, TemplateHandler] = {}
        self._matcher = UriTemplateMatcher()
        self.logger = logging.getLogger("urimatch.resources")

    def add_template(
        self, template: ResourceTemplate, handler: TemplateHandler
    ) -> None:
        """Add a resource template with its handler function.

        Re-adding a template with the same URI template replaces the previous
        definition and handler but keeps its position.

        Args:
            template: ResourceTemplate definition with URI pattern and metadata.
            handler: Async function called as ``handler(uri, params)`` for each
                read that matches the template.
        """
        pattern = template.uri_template
        if pattern in self.registered_templates:
            self.logger.info(f"Overriding resource template '{pattern}'")

        self._matcher.add(pattern)
        self.registered_templates[pattern] = template
        self.template_handlers[pattern] = handler

    def remove_template(self, uri_template: str) -> None:
        """Remove a resource template by URI template."""
        self._matcher.remove(uri_template)
        self.registered_templates.pop(uri_template, None)
        self.template_handlers.pop(uri_template, None)

    def clear_templates(self) -> None:
        """Remove all resource templates and their handlers."""
        self._matcher.clear()
        self.registered_templates.clear()
        self.template_handlers.clear()

    def get_templates(self) -> list[ResourceTemplate]:
        """Get all resource templates in registration order."""
        return [self.registered_templates[p] for p in self._matcher.all()]

    def resolve(self, uri: str) -> tuple[ResourceTemplate, MatchResult] | None:
        """Find the first template matching a URI.

        Returns:
            The template and its match, or None if no template matches.
        """
        result = self._matcher.match(uri)
        if result is None:
            return None
        return self.registered_templates[result.template], result

    async def handle_read(self, uri: str) -> Any:
        """Read a resource by URI through its template's handler.

        Handler exceptions bubble up to the caller.

        Args:
            uri: Concrete resource URI.

        Returns:
            Whatever the matched handler returns.

        Raises:
            KeyError: If the URI matches no registered template.
        """
        resolved = self.resolve(uri)
        if resolved is None:
            raise KeyError(f"Unknown resource: {uri}")

        template, result = resolved
        self.logger.debug(
            f"Dispatching '{uri}' to template '{template.uri_template}'"
        )
        return await self.template_handlers[template.uri_template](uri, result.params)
