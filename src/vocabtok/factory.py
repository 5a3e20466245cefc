"""Factory functions for creating tokenizers and one-shot encode/decode."""

import functools
import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Final, overload

from ._models.base import Tokenizer
from ._models.greedy import GreedyTokenizer
from ._models.regex import RegexTokenizer
from .errors import UnknownFormatError
from .loaders import (
    VocabFormat,
    detect_format,
    load_binary,
    load_json_bpe,
    load_json_simple,
)
from .types import Token
from .vocab import BPEVocabulary, Vocabulary

log = logging.getLogger(__name__)


_LOADERS: Final[dict[str, Callable[[str | Path], Vocabulary | BPEVocabulary]]] = {
    "binary": load_binary,
    "json-simple": load_json_simple,
    "json-bpe": load_json_bpe,
}


def list_formats() -> list[str]:
    """Return names of the supported vocabulary file formats."""
    return list(_LOADERS.keys())


@overload
def get_tokenizer(vocab: Vocabulary, **kwargs) -> GreedyTokenizer: ...


@overload
def get_tokenizer(vocab: BPEVocabulary, **kwargs) -> RegexTokenizer: ...


def get_tokenizer(vocab: Vocabulary | BPEVocabulary, **kwargs) -> Tokenizer:
    """
    Create the tokenizer that matches a vocabulary's scheme.

    :param vocab: Loaded vocabulary.
    :param kwargs: Passed to the tokenizer, e.g. ``eot_token`` for the greedy
        tokenizer or ``pattern`` for the regex tokenizer.
    :return: ``GreedyTokenizer`` for a ``Vocabulary``, ``RegexTokenizer`` for a
        ``BPEVocabulary``.
    :raises TypeError: If ``vocab`` is neither.

    .. code-block:: python

        tokenizer = get_tokenizer(load_binary("gpt2_tokenizer.bin"))
        tokenizer = get_tokenizer(load_json_bpe("bpe.json"), pattern=r"\S+|\s+")
    """
    if isinstance(vocab, Vocabulary):
        return GreedyTokenizer(vocab, **kwargs)
    if isinstance(vocab, BPEVocabulary):
        return RegexTokenizer(vocab, **kwargs)
    raise TypeError(f"unsupported vocabulary type: {type(vocab).__name__}")


def from_pretrained(
    path: str | Path, fmt: VocabFormat | None = None, **kwargs
) -> Tokenizer:
    """
    Load a vocabulary file and wrap it in the matching tokenizer.

    :param path: Path to a binary or JSON vocabulary file.
    :param fmt: One of ``list_formats()``; detected from the file when ``None``.
    :param kwargs: Passed to ``get_tokenizer``.
    :return: Ready-to-use tokenizer.
    :raises UnknownFormatError: If ``fmt`` is not a known format name.
    :raises ModelLoadError: If the file cannot be detected, read or parsed.

    .. code-block:: python

        tokenizer = from_pretrained("path/to/tokenizer.json")
        tokens = tokenizer.encode("hello there")
    """
    if fmt is None:
        fmt = detect_format(path)
        log.debug(f"detected {fmt} vocabulary format for {path}")

    if fmt not in _LOADERS:
        raise UnknownFormatError(
            "unknown vocabulary format", invalid_name=fmt, available=list_formats()
        )

    vocab = _LOADERS[fmt](path)
    return get_tokenizer(vocab, **kwargs)


@functools.lru_cache(maxsize=16)
def _cached_tokenizer(vocab: Vocabulary | BPEVocabulary) -> Tokenizer:
    """Build a default tokenizer once per vocabulary instance."""
    log.debug(f"building tokenizer for {type(vocab).__name__} of size {vocab.size}")
    return get_tokenizer(vocab)


def encode(vocab: Vocabulary | BPEVocabulary, text: str) -> list[Token]:
    """
    Encode text against a loaded vocabulary with default tokenizer settings.

    :raises UnknownTokenError: If a BPE symbol is missing from the encoder.
    """
    return _cached_tokenizer(vocab).encode(text)


def decode(vocab: Vocabulary | BPEVocabulary, tokens: Sequence[Token]) -> str:
    """
    Decode tokens against a loaded vocabulary with default tokenizer settings.

    :raises TokenOutOfRangeError: If a greedy-scheme id is outside the vocabulary.
    :raises UnknownTokenIDError: If a BPE-scheme id is unknown.
    """
    return _cached_tokenizer(vocab).decode(tokens)


__all__ = [
    "list_formats",
    "get_tokenizer",
    "from_pretrained",
    "encode",
    "decode",
]
