"""
Longest-prefix matching over byte token tables.
"""

from collections.abc import Mapping
from typing import Final

from typing_extensions import deprecated

from .types import Token, TokenBytes

# bytes are 0-255, so a negative key cannot collide with a child edge
_END: Final[int] = -1

type _Node = dict[int, _Node | Token]


class TokenTrie:
    """
    Byte trie over a vocabulary's ``token_to_id`` table.

    Walking the trie along the input yields every vocabulary entry that is a
    prefix of it in increasing length, so the last terminal seen is the
    longest match. The empty token never matches.
    """

    def __init__(self, token_to_id: Mapping[TokenBytes, Token]) -> None:
        self._root: _Node = {}
        self.max_len = 0
        for seq, tok in token_to_id.items():
            if not seq:
                continue
            node = self._root
            for b in seq:
                node = node.setdefault(b, {})  # type: ignore[assignment]
            node[_END] = tok
            self.max_len = max(self.max_len, len(seq))

    def longest_prefix(self, data: bytes, start: int = 0) -> tuple[Token, int] | None:
        """
        Return ``(token, length)`` of the longest entry matching ``data[start:]``.

        :returns: ``None`` when no entry is a prefix of the remaining bytes.
        """
        node = self._root
        best: tuple[Token, int] | None = None
        pos = start
        n = len(data)
        while pos < n:
            child = node.get(data[pos])
            if child is None:
                break
            node = child  # type: ignore[assignment]
            pos += 1
            if _END in node:
                best = (node[_END], pos - start)  # type: ignore[assignment]
        return best


@deprecated(
    "Reference implementation for documentation only. Use `TokenTrie` for production."
)
def slow_longest_prefix(
    data: bytes, token_to_id: Mapping[TokenBytes, Token], start: int = 0
) -> tuple[Token, int] | None:
    """
    Find the longest vocabulary entry that prefixes ``data[start:]``.

    Tries every prefix from the full remaining length down to one byte and
    returns the first one present in ``token_to_id``.

    Naive algorithm: O(n) dictionary probes per position, each hashing up to
    n bytes, so O(n^2) work per call on an input of n bytes.
    """
    for end in range(len(data), start, -1):
        tok = token_to_id.get(data[start:end])
        if tok is not None:
            return tok, end - start
    return None


__all__ = ["TokenTrie", "slow_longest_prefix"]
