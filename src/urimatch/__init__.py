"""urimatch: RFC 6570 URI templates in both directions.

Expand a template with variables, or match a concrete URI back to the
variables that produce it:

    >>> from urimatch import parse_template
    >>> parsed = parse_template("/repos/{owner}/{repo}{?page}")
    >>> parsed.expand({"owner": "octocat", "repo": "Hello-World", "page": 2})
    '/repos/octocat/Hello-World?page=2'
    >>> parsed.match("/repos/octocat/Hello-World?page=2").params
    {'owner': 'octocat', 'repo': 'Hello-World', 'page': '2'}
"""

from urimatch.errors import (
    EmptyExpression,
    EmptyVariableName,
    InvalidPrefixLength,
    TemplateSyntaxError,
    UnclosedExpression,
    UriTemplateError,
)
from urimatch.expander import UriTemplateExpander, expand_template
from urimatch.matcher import match_uri
from urimatch.operators import OPERATORS, Operator, OperatorSpec
from urimatch.parser import parse_template
from urimatch.registry import UriTemplateMatcher
from urimatch.resources import ResourceTemplate, ResourceTemplateManager
from urimatch.template import (
    Expression,
    Literal,
    MatchResult,
    ParsedTemplate,
    VarSpec,
)

__version__ = "0.1.0"

__all__ = [
    # Parsing
    "parse_template",
    "ParsedTemplate",
    "Literal",
    "Expression",
    "VarSpec",
    "Operator",
    "OperatorSpec",
    "OPERATORS",
    # Expansion
    "expand_template",
    "UriTemplateExpander",
    # Matching
    "match_uri",
    "MatchResult",
    "UriTemplateMatcher",
    # MCP resources
    "ResourceTemplate",
    "ResourceTemplateManager",
    # Errors
    "UriTemplateError",
    "TemplateSyntaxError",
    "UnclosedExpression",
    "EmptyExpression",
    "EmptyVariableName",
    "InvalidPrefixLength",
]
