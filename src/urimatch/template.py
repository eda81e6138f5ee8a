"""Parsed template data model.

A template is an ordered tuple of parts. Each part is either literal text
or one ``{...}`` expression. Everything here is immutable once built, so
a ParsedTemplate can be shared between threads and callers.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from urimatch.operators import MAX_PREFIX_LENGTH, Operator

MatchValue = Union[str, list[str]]


@dataclass(frozen=True)
class VarSpec:
    """One variable reference inside an expression.

    ``name:3`` sets ``prefix``, ``name*`` sets ``explode``. The two are
    mutually exclusive.
    """

    name: str
    prefix: int | None = None
    explode: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("variable name must not be empty")
        if self.prefix is not None:
            if self.explode:
                raise ValueError("prefix and explode cannot both be set")
            if not (1 <= self.prefix <= MAX_PREFIX_LENGTH):
                raise ValueError(f"prefix must be 1-{MAX_PREFIX_LENGTH}")

    def __str__(self) -> str:
        if self.prefix is not None:
            return f"{self.name}:{self.prefix}"
        if self.explode:
            return f"{self.name}*"
        return self.name


@dataclass(frozen=True)
class Literal:
    """Template text copied verbatim."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Expression:
    """A ``{...}`` block: an operator and one or more variables."""

    operator: Operator
    variables: tuple[VarSpec, ...]

    def __post_init__(self) -> None:
        if not self.variables:
            raise ValueError("expression needs at least one variable")

    def __str__(self) -> str:
        names = ",".join(str(var) for var in self.variables)
        return f"{{{self.operator.value}{names}}}"


Part = Union[Literal, Expression]


@dataclass(frozen=True)
class ParsedTemplate:
    """A template string and its parts.

    Joining ``str(part)`` over ``parts`` gives back ``template``.
    Build one with :func:`urimatch.parser.parse_template`.
    """

    template: str
    parts: tuple[Part, ...]

    def __str__(self) -> str:
        return self.template

    @property
    def expressions(self) -> tuple[Expression, ...]:
        return tuple(part for part in self.parts if isinstance(part, Expression))

    @property
    def variable_names(self) -> list[str]:
        """Variable names in order of first appearance."""
        names: dict[str, None] = {}
        for expression in self.expressions:
            for var in expression.variables:
                names.setdefault(var.name, None)
        return list(names)

    def expand(self, variables: Mapping[str, Any] | None = None) -> str:
        from urimatch.expander import expand_template

        return expand_template(self, variables or {})

    def match(self, uri: str) -> MatchResult | None:
        from urimatch.matcher import match_uri

        return match_uri(self, uri)


@dataclass(frozen=True)
class MatchResult:
    """Variables recovered from a URI by a successful match.

    Scalars come back as decoded strings and exploded variables as lists of
    decoded strings. Variables the URI left out are absent from ``params``.
    """

    template: str
    params: dict[str, MatchValue] = field(default_factory=dict)
