"""RFC 6570 expression operators as static data.

Each operator's behavior is a row in ``OPERATORS``. The expander and the
matcher both read the same row, which keeps the two directions symmetric.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from enum import Enum

UNRESERVED = frozenset(string.ascii_letters + string.digits + "-._~")
RESERVED = frozenset(":/?#[]@!$&'()*+,;=")
HEX_DIGITS = frozenset(string.hexdigits)

# Upper bound for the ``:N`` prefix modifier (RFC 6570 max-length).
MAX_PREFIX_LENGTH = 9999


class Operator(Enum):
    NONE = ""
    PLUS = "+"
    HASH = "#"
    DOT = "."
    SLASH = "/"
    SEMICOLON = ";"
    QUESTION = "?"
    AMP = "&"

    @classmethod
    def from_char(cls, char: str) -> Operator | None:
        """Return the operator for a leading expression char, if it is one."""
        if not char:
            return None
        for operator in cls:
            if operator.value == char:
                return operator
        return None


@dataclass(frozen=True)
class OperatorSpec:
    """Expansion rules for one operator (RFC 6570 Appendix A table).

    Attributes:
        first: Emitted once before the expression output, if anything is defined.
        sep: Joins the rendered variables and exploded items.
        named: Render ``name=value`` instead of the bare value.
        ifemp: Suffix for a named variable whose value is empty.
        allow_reserved: Pass reserved characters and ``%XX`` triplets through.
        matchable: ASCII characters an expansion with this operator can
            produce. ``%XX`` triplets and non-ASCII characters are always
            accepted by the matcher and are not listed here.
    """

    first: str
    sep: str
    named: bool
    ifemp: str
    allow_reserved: bool
    matchable: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.allow_reserved:
            matchable = UNRESERVED | RESERVED
        else:
            matchable = UNRESERVED | frozenset(",=" + self.sep)
        object.__setattr__(self, "matchable", matchable)


OPERATORS: dict[Operator, OperatorSpec] = {
    Operator.NONE: OperatorSpec("", ",", False, "", False),
    Operator.PLUS: OperatorSpec("", ",", False, "", True),
    Operator.HASH: OperatorSpec("#", ",", False, "", True),
    Operator.DOT: OperatorSpec(".", ".", False, "", False),
    Operator.SLASH: OperatorSpec("/", "/", False, "", False),
    Operator.SEMICOLON: OperatorSpec(";", ";", True, "", False),
    Operator.QUESTION: OperatorSpec("?", "&", True, "=", False),
    Operator.AMP: OperatorSpec("&", "&", True, "=", False),
}
