"""RFC 6570 template expansion.

Follows the algorithm in RFC 6570 Appendix A. Expansion is best effort:
a value whose shape does not fit its modifier, such as a prefix on a list,
renders nothing instead of failing the whole template.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from urimatch.encoding import pct_encode
from urimatch.operators import OPERATORS, OperatorSpec
from urimatch.parser import parse_template
from urimatch.template import Expression, Literal, ParsedTemplate, VarSpec


def expand_template(parsed: ParsedTemplate, variables: Mapping[str, Any]) -> str:
    """Expand a parsed template with the given variable bindings.

    Args:
        parsed: Template from :func:`parse_template`.
        variables: Name to value. Values can be ``None`` (undefined), strings,
            numbers, booleans, sequences (lists) or mappings (associative arrays).

    Returns:
        The expanded URI.
    """
    output: list[str] = []
    for part in parsed.parts:
        if isinstance(part, Literal):
            output.append(part.text)
        else:
            output.append(_expand_expression(part, variables))
    return "".join(output)


def _expand_expression(expression: Expression, variables: Mapping[str, Any]) -> str:
    spec = OPERATORS[expression.operator]
    rendered: list[str] = []
    for var in expression.variables:
        value = variables.get(var.name)
        if not _is_defined(value):
            continue
        piece = _expand_variable(var, value, spec)
        if piece is not None:
            rendered.append(piece)

    if not rendered:
        return ""
    return spec.first + spec.sep.join(rendered)


def _expand_variable(var: VarSpec, value: Any, spec: OperatorSpec) -> str | None:
    """Render one variable, or return None when its shape can't be rendered."""
    if isinstance(value, Mapping):
        if var.prefix is not None:
            return None
        pairs = [(_to_text(k), _to_text(v)) for k, v in value.items()]
        if var.explode:
            return spec.sep.join(
                _named(k, v, spec) if spec.named else f"{_enc(k, spec)}={_enc(v, spec)}"
                for k, v in pairs
            )
        joined = ",".join(f"{_enc(k, spec)},{_enc(v, spec)}" for k, v in pairs)
        return _named_raw(var.name, joined, spec) if spec.named else joined

    if _is_list(value):
        if var.prefix is not None:
            return None
        items = [_to_text(item) for item in value]
        if var.explode:
            if spec.named:
                return spec.sep.join(_named(var.name, item, spec) for item in items)
            return spec.sep.join(_enc(item, spec) for item in items)
        joined = ",".join(_enc(item, spec) for item in items)
        return _named_raw(var.name, joined, spec) if spec.named else joined

    text = _to_text(value)
    if var.prefix is not None:
        text = text[: var.prefix]
    if spec.named:
        return _named(var.name, text, spec)
    return _enc(text, spec)


def _named(name: str, value: str, spec: OperatorSpec) -> str:
    return _named_raw(name, _enc(value, spec), spec)


def _named_raw(name: str, encoded: str, spec: OperatorSpec) -> str:
    if not encoded:
        return name + spec.ifemp
    return f"{name}={encoded}"


def _enc(value: str, spec: OperatorSpec) -> str:
    return pct_encode(value, allow_reserved=spec.allow_reserved)


def _is_list(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _is_defined(value: Any) -> bool:
    # RFC 6570 2.3: empty lists and empty associative arrays are undefined,
    # the empty string is defined.
    if value is None:
        return False
    if isinstance(value, Mapping) or _is_list(value):
        return len(value) > 0
    return True


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class UriTemplateExpander:
    """Parses a template once and expands it on demand.

    Usage::

        expander = UriTemplateExpander("/users/{id}{?fields*}")
        expander.expand({"id": 7, "fields": ["name", "email"]})
        # '/users/7?fields=name&fields=email'
    """

    def __init__(self, template: str) -> None:
        self.parsed = parse_template(template)

    @property
    def template(self) -> str:
        return self.parsed.template

    def expand(
        self, variables: Mapping[str, Any] | None = None, **kwargs: Any
    ) -> str:
        """Expand with a mapping, keyword arguments, or both (keywords win)."""
        merged = {**(variables or {}), **kwargs}
        return expand_template(self.parsed, merged)
