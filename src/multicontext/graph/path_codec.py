"""Encoding of context paths into index keys.

A path is an ordered sequence of item values. Each element is
percent-encoded and prefixed with ``/``, so separators inside a value can
never be confused with the separators between values::

    >>> encode(["Animal", "Cat"])
    '/Animal/Cat'
    >>> encode(["a/b", "c"])
    '/a%2Fb/c'
    >>> encode([])
    ''
"""

from typing import Sequence
from urllib.parse import quote, unquote


SEPARATOR = "/"


def encode(path: Sequence[str]) -> str:
    """Encode a path into its index key.

    Args:
        path: Ordered item values from the root down

    Returns:
        Key that is equal for two paths iff they hold the same values in the same order
    """
    if isinstance(path, str):
        raise TypeError("path must be a sequence of item values, not a string")
    return "".join(SEPARATOR + quote(value, safe="") for value in path)


def decode(key: str) -> tuple[str, ...]:
    """Decode an index key back into its path.

    Raises:
        ValueError: If the key was not produced by encode()
    """
    if key == "":
        return ()
    if not key.startswith(SEPARATOR):
        raise ValueError(f"Not an encoded path: {key!r}")
    return tuple(unquote(part) for part in key[1:].split(SEPARATOR))
