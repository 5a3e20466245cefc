"""Shared fixtures that write small vocabulary files for the test suite."""

import json
from pathlib import Path

import numpy as np
import pytest

from vocabtok import BPEVocabulary, Vocabulary
from vocabtok.loaders import BINARY_MAGIC, BINARY_VERSION, HEADER_WORDS


def binary_vocab_bytes(
    tokens: list[bytes],
    *,
    magic: int = BINARY_MAGIC,
    version: int = BINARY_VERSION,
    size: int | None = None,
) -> bytes:
    """Serialize tokens into the fixed-header binary vocabulary format."""
    header = np.zeros(HEADER_WORDS, dtype="<u4")
    header[0] = magic
    header[1] = version
    header[2] = len(tokens) if size is None else size
    body = b"".join(bytes([len(tok)]) + tok for tok in tokens)
    return header.tobytes() + body


@pytest.fixture
def write_binary(tmp_path):
    """Return a helper that writes a binary vocabulary file and returns its path."""

    def _write(tokens: list[bytes], name: str = "vocab.bin", **kwargs) -> Path:
        path = tmp_path / name
        path.write_bytes(binary_vocab_bytes(tokens, **kwargs))
        return path

    return _write


@pytest.fixture
def write_json(tmp_path):
    """Return a helper that dumps an object to a JSON file and returns its path."""

    def _write(data, name: str = "vocab.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def abc_vocab() -> Vocabulary:
    """Return the nested-prefix vocabulary {"a": 0, "ab": 1, "abc": 2}."""
    return Vocabulary.from_tokens([b"a", b"ab", b"abc"])


@pytest.fixture
def hello_tables() -> dict:
    """Return raw JSON tables for a small BPE vocabulary built around "hello"."""
    return {
        "encoder": {
            "h": 0,
            "e": 1,
            "l": 2,
            "o": 3,
            " ": 4,
            "he": 5,
            "ll": 6,
            "hell": 7,
            "hello": 8,
            " hello": 9,
            "Ġworld": 10,
            "<|endoftext|>": 50256,
        },
        "bpe_ranks": {
            "h,e": 0,
            "l,l": 1,
            "he,ll": 2,
            "hell,o": 3,
            " ,hello": 4,
        },
        "special_tokens": {"<|endoftext|>": 50256},
    }


@pytest.fixture
def hello_vocab(hello_tables) -> BPEVocabulary:
    """Return the "hello" BPE vocabulary."""
    return BPEVocabulary.from_tables(
        hello_tables["encoder"],
        hello_tables["bpe_ranks"],
        hello_tables["special_tokens"],
    )
