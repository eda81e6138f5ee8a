"""Percent-encoding primitives shared by the expander and the matcher."""

from __future__ import annotations

from urllib.parse import quote, unquote

from urimatch.operators import HEX_DIGITS, RESERVED

_RESERVED_SAFE = "".join(sorted(RESERVED))


def is_pct_triplet(text: str, index: int) -> bool:
    """Check whether ``text[index:index + 3]`` is a ``%XX`` escape."""
    return (
        text.startswith("%", index)
        and index + 2 < len(text)
        and text[index + 1] in HEX_DIGITS
        and text[index + 2] in HEX_DIGITS
    )


def pct_encode(value: str, allow_reserved: bool = False) -> str:
    """Percent-encode a value for expansion.

    Unreserved characters are kept. With ``allow_reserved`` the reserved
    set and already-encoded ``%XX`` triplets also pass through, while a
    bare ``%`` is still escaped.
    """
    if not allow_reserved:
        return quote(value, safe="")

    chunks: list[str] = []
    start = 0
    index = 0
    while index < len(value):
        if is_pct_triplet(value, index):
            chunks.append(quote(value[start:index], safe=_RESERVED_SAFE))
            chunks.append(value[index : index + 3])
            index += 3
            start = index
        else:
            index += 1
    chunks.append(quote(value[start:], safe=_RESERVED_SAFE))
    return "".join(chunks)


def pct_decode(raw: str) -> str:
    """Decode ``%XX`` escapes as UTF-8.

    Raises:
        UnicodeDecodeError: If the escapes do not form valid UTF-8.
    """
    return unquote(raw, errors="strict")


def next_unit(text: str, index: int) -> tuple[bytes, int]:
    """Read one encoded unit: a ``%XX`` escape or a single character.

    Returns:
        The unit's bytes and the index just past it.
    """
    if is_pct_triplet(text, index):
        return bytes([int(text[index + 1 : index + 3], 16)]), index + 3
    return text[index].encode("utf-8"), index + 1


def decoded_bytes(text: str) -> bytes:
    """Return the byte string ``text`` stands for once decoded."""
    out = bytearray()
    index = 0
    while index < len(text):
        unit, index = next_unit(text, index)
        out += unit
    return bytes(out)
