"""
Hierarchical addresses for nodes and edges.

An address is a tuple of string parts. Addresses are compared as tuples, so
sorting them gives the lexicographic order used wherever a deterministic
ordering is needed.
"""
from __future__ import annotations

from typing import Iterable, Sequence, Tuple
from urllib.parse import unquote

from .errors import InvalidAddressError

Address = Tuple[str, ...]

SEPARATOR = "/"


def from_parts(parts: Iterable[str]) -> Address:
    if isinstance(parts, str):
        raise InvalidAddressError(f"expected a sequence of parts, got string {parts!r}")
    address = tuple(parts)
    for part in address:
        if not isinstance(part, str):
            raise InvalidAddressError(f"address part must be a string: {part!r}")
        if "\0" in part:
            raise InvalidAddressError(f"address part contains NUL: {part!r}")
    return address


def has_prefix(address: Sequence[str], prefix: Sequence[str]) -> bool:
    return len(prefix) <= len(address) and tuple(address[: len(prefix)]) == tuple(prefix)


def _escape(part: str) -> str:
    return part.replace("%", "%25").replace(SEPARATOR, "%2F")


def to_string(address: Sequence[str]) -> str:
    """
    Slash-separated form used on the command line and in URLs.

    "%" and "/" inside a part are percent-encoded, so ``parse`` inverts this
    for every address except the single empty part ``("",)``.
    """
    return SEPARATOR.join(_escape(part) for part in address)


def parse(text: str) -> Address:
    if not text:
        return ()
    return from_parts(unquote(piece) for piece in text.split(SEPARATOR))
