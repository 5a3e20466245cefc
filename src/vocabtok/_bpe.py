"""
Core Byte Pair Encoding (BPE) operations.
"""

from collections.abc import Mapping

from .types import Symbol, SymbolPair, Token


def pair_key(pair: SymbolPair) -> str:
    """Return the comma-joined key a pair is ranked under in ``bpe_ranks``."""
    return f"{pair[0]},{pair[1]}"


def get_pairs(symbols: list[Symbol]) -> list[SymbolPair]:
    """Return all adjacent symbol pairs in sequence order."""
    return [(symbols[i], symbols[i + 1]) for i in range(len(symbols) - 1)]


def best_pair(
    symbols: list[Symbol], bpe_ranks: Mapping[str, int]
) -> SymbolPair | None:
    """
    Select the ranked pair to merge next.

    The lowest rank wins. On equal ranks the leftmost pair wins because only a
    strictly lower rank replaces the current minimum.
    """
    min_pair: SymbolPair | None = None
    min_rank: int | None = None
    for pair in get_pairs(symbols):
        rank = bpe_ranks.get(pair_key(pair))
        if rank is not None and (min_rank is None or rank < min_rank):
            min_pair, min_rank = pair, rank
    return min_pair


def bpe_merge(symbols: list[Symbol], target: SymbolPair) -> list[Symbol]:
    """
    Merge all non-overlapping occurrences of a target pair into one symbol.

    The sequence is scanned left to right in a single pass, so ``a a a`` with
    target ``(a, a)`` becomes ``aa a``.
    """
    merged: list[Symbol] = []

    i = 0
    while i < len(symbols):
        # check if we can form a pair and it matches the target
        if (
            i < len(symbols) - 1
            and symbols[i] == target[0]
            and symbols[i + 1] == target[1]
        ):
            merged.append(target[0] + target[1])
            i += 2
        else:
            merged.append(symbols[i])
            i += 1

    return merged


def bpe(
    chunk: str,
    bpe_ranks: Mapping[str, int],
    special_tokens: Mapping[str, Token] | None = None,
    decoder: Mapping[Token, str] | None = None,
) -> list[Symbol]:
    """
    Split a pre-tokenized chunk into BPE symbols.

    A chunk equal to a special token is returned whole as the decoder string
    for its id; an id the decoder lacks yields the empty symbol, which the
    encoder lookup then rejects.
    Otherwise the chunk starts as single characters and the best ranked pair
    is merged until no ranked pair is left or one symbol remains.

    :param chunk: One pre-tokenizer match.
    :param bpe_ranks: Pair key to merge rank, lower merges first.
    :param special_tokens: Literal to id for tokens that bypass merging.
    :param decoder: Id to string table used to render special tokens.
    :returns: Symbols in chunk order.
    """
    if special_tokens and chunk in special_tokens:
        if decoder is None:
            return [""]
        return [decoder.get(special_tokens[chunk], "")]

    symbols = list(chunk)
    if len(symbols) <= 1:
        return symbols

    while True:
        target = best_pair(symbols, bpe_ranks)
        if target is None:
            break
        symbols = bpe_merge(symbols, target)
        if len(symbols) == 1:
            break

    return symbols


__all__ = ["pair_key", "get_pairs", "best_pair", "bpe_merge", "bpe"]
