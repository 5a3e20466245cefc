"""
Readers for the binary and JSON vocabulary file formats.
"""

import json
import logging
from pathlib import Path
from typing import Any, Final, Literal

import numpy as np

from ._decorators import measure_time
from .errors import (
    VocabularyCorruptionError,
    VocabularyFormatError,
    VocabularyParseError,
    VocabularyReadError,
)
from .types import Token, TokenBytes
from .vocab import BPEVocabulary, Vocabulary

BINARY_MAGIC: Final[int] = 20240328
BINARY_VERSION: Final[int] = 1
HEADER_WORDS: Final[int] = 256
# 256 little-endian uint32 words
HEADER_BYTES: Final[int] = HEADER_WORDS * 4
BINARY_SUFFIX: Final[str] = ".bin"
# UTF-8 encoding of U+0120, marks a leading space in GPT-2 style vocab keys
SPACE_MARKER_BYTES: Final[bytes] = b"\xc4\xa0"

VocabFormat = Literal["binary", "json-simple", "json-bpe"]

log = logging.getLogger(__name__)


@measure_time
def load_binary(path: str | Path) -> Vocabulary:
    """
    Load a vocabulary from the fixed-header binary format.

    The file starts with 256 little-endian uint32 words: magic, version and
    vocabulary size, the rest reserved. Each of the ``size`` records that
    follow is one length byte and that many raw token bytes.

    :param path: Path to the ``.bin`` vocabulary file.
    :returns: Vocabulary whose ids are the record positions.
    :raises VocabularyReadError: If the file cannot be read or the header is short.
    :raises VocabularyFormatError: If magic or version do not match.
    :raises VocabularyCorruptionError: If a record is empty or cut short.
    """
    path = Path(path)
    log.info(f"loading binary vocabulary from {path}")

    tokens: list[TokenBytes] = []
    try:
        with path.open("rb") as f:
            raw_header = f.read(HEADER_BYTES)
            if len(raw_header) < HEADER_BYTES:
                raise VocabularyReadError(
                    f"truncated header: (expected {HEADER_BYTES} bytes) (got {len(raw_header)})",
                    model_path=str(path),
                )
            header = np.frombuffer(raw_header, dtype="<u4")
            magic, fmt_version, vocab_size = (int(word) for word in header[:3])
            log.debug(
                f"header: magic={magic} version={fmt_version} vocab_size={vocab_size}"
            )

            if magic != BINARY_MAGIC or fmt_version != BINARY_VERSION:
                raise VocabularyFormatError(
                    "incorrect header for tokenizer",
                    model_path=str(path),
                    header=(magic, fmt_version),
                )

            for record in range(vocab_size):
                prefix = f.read(1)
                if not prefix:
                    raise VocabularyCorruptionError(
                        "unexpected end of file before length byte",
                        model_path=str(path),
                        record=record,
                    )
                length = prefix[0]
                if length == 0:
                    raise VocabularyCorruptionError(
                        "zero-length token record",
                        model_path=str(path),
                        record=record,
                    )
                seq = f.read(length)
                if len(seq) < length:
                    raise VocabularyCorruptionError(
                        f"truncated token record: (expected {length} bytes) (got {len(seq)})",
                        model_path=str(path),
                        record=record,
                    )
                tokens.append(seq)

            if f.read(1):
                log.debug("ignoring trailing bytes after last record")
    except OSError as e:
        raise VocabularyReadError(
            "failed to read vocabulary file", model_path=str(path)
        ) from e

    vocab = Vocabulary.from_tokens(tokens)
    if not vocab.size:
        log.warning(f"binary vocabulary at {path} is empty")
    log.info(f"binary vocabulary loaded: {vocab.size} tokens")
    return vocab


@measure_time
def load_json_simple(path: str | Path) -> Vocabulary:
    """
    Load the ``model.vocab`` table of a ``tokenizer.json`` style file.

    Keys starting with the ``Ġ`` space marker get a plain space instead.
    Entries are ordered by their original id and renumbered by position, so
    sparse or offset ids end up dense and 0-based. ``model.merges`` and
    ``model.special_tokens`` are shape-checked but not used.

    :param path: Path to the JSON vocabulary file.
    :returns: Vocabulary for the greedy tokenizer.
    :raises VocabularyReadError: If the file cannot be read.
    :raises VocabularyParseError: If the JSON is malformed or has the wrong shape.
    """
    path = Path(path)
    log.info(f"loading simple JSON vocabulary from {path}")

    data = _read_json(path)
    _expect_type(data, "version", str, path)
    model = _expect_type(data, "model", dict, path) or {}
    _expect_type(model, "type", str, path, field_prefix="model.")
    _expect_list_of_str(model, "merges", path)
    _expect_mapping(model, "special_tokens", str, path, field_prefix="model.")
    raw_vocab = _expect_mapping(model, "vocab", int, path, field_prefix="model.")

    log.debug(
        f"vocabulary version={data.get('version')} model type={model.get('type')}"
    )

    pairs: list[tuple[TokenBytes, Token]] = []
    for key, tok in raw_vocab.items():
        seq = key.encode("utf-8", errors="surrogatepass")
        if seq.startswith(SPACE_MARKER_BYTES):
            seq = b" " + seq[len(SPACE_MARKER_BYTES) :]
        pairs.append((seq, tok))

    # stable sort: equal source ids keep document order
    pairs.sort(key=lambda pair: pair[1])
    if pairs and any(tok != pos for pos, (_, tok) in enumerate(pairs)):
        log.debug("source ids are not dense and 0-based, renumbering by sorted position")

    vocab = Vocabulary.from_tokens(seq for seq, _ in pairs)
    if not vocab.size:
        log.warning(f"JSON vocabulary at {path} is empty")
    log.info(f"simple JSON vocabulary loaded: {vocab.size} tokens")
    return vocab


@measure_time
def load_json_bpe(path: str | Path) -> BPEVocabulary:
    """
    Load an encoder, merge-rank and special-token table from JSON.

    :param path: Path to a JSON object with ``encoder``, ``bpe_ranks`` and
        ``special_tokens`` mappings. Missing or null mappings load as empty.
    :returns: Vocabulary for the regex BPE tokenizer.
    :raises VocabularyReadError: If the file cannot be read.
    :raises VocabularyParseError: If the JSON is malformed or has the wrong shape.
    """
    path = Path(path)
    log.info(f"loading BPE vocabulary from {path}")

    data = _read_json(path)
    encoder = _expect_mapping(data, "encoder", int, path)
    bpe_ranks = _expect_mapping(data, "bpe_ranks", int, path)
    special_tokens = _expect_mapping(data, "special_tokens", int, path)

    vocab = BPEVocabulary.from_tables(encoder, bpe_ranks, special_tokens)
    if not vocab.size:
        log.warning(f"BPE vocabulary at {path} has an empty encoder")
    log.info(
        f"BPE vocabulary loaded: {len(vocab.encoder)} tokens, "
        f"{len(vocab.bpe_ranks)} merge ranks, {len(vocab.special_tokens)} special tokens"
    )
    return vocab


def detect_format(path: str | Path) -> VocabFormat:
    """
    Work out which loader reads the file at ``path``.

    ``.bin`` files and files starting with the binary magic are binary. JSON
    documents with a ``model`` object are the simple scheme; those with an
    ``encoder`` are the BPE scheme.

    :raises VocabularyReadError: If the file cannot be read.
    :raises VocabularyParseError: If a non-binary file is not a JSON object.
    :raises VocabularyFormatError: If the JSON matches neither scheme.
    """
    path = Path(path)
    if path.suffix == BINARY_SUFFIX:
        return "binary"

    try:
        with path.open("rb") as f:
            head = f.read(4)
    except OSError as e:
        raise VocabularyReadError(
            "failed to read vocabulary file", model_path=str(path)
        ) from e

    if len(head) == 4 and int(np.frombuffer(head, dtype="<u4")[0]) == BINARY_MAGIC:
        return "binary"

    data = _read_json(path)
    if "model" in data:
        return "json-simple"
    if "encoder" in data:
        return "json-bpe"
    raise VocabularyFormatError(
        "unrecognised vocabulary format: expected 'model' or 'encoder' key",
        model_path=str(path),
    )


def _read_json(path: Path) -> dict[str, Any]:
    """Read and parse a JSON document whose top level must be an object."""
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise VocabularyParseError(
            "vocabulary file is not valid UTF-8", model_path=str(path)
        ) from e
    except OSError as e:
        raise VocabularyReadError(
            "failed to read vocabulary file", model_path=str(path)
        ) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise VocabularyParseError(
            f"error unmarshaling JSON: {e}", model_path=str(path)
        ) from e

    if not isinstance(data, dict):
        raise VocabularyParseError(
            f"expected a JSON object at top level, got {type(data).__name__}",
            model_path=str(path),
        )
    return data


def _is_type(value: Any, expected: type) -> bool:
    # bool is a subclass of int but never a valid id or rank
    if expected is int and isinstance(value, bool):
        return False
    return isinstance(value, expected)


def _expect_type(
    obj: dict[str, Any],
    field: str,
    expected: type,
    path: Path,
    field_prefix: str = "",
) -> Any:
    """Return ``obj[field]``, raising if it is present with the wrong type."""
    value = obj.get(field)
    if value is not None and not _is_type(value, expected):
        raise VocabularyParseError(
            f"field {field_prefix}{field} must be {expected.__name__}, "
            f"got {type(value).__name__}",
            model_path=str(path),
        )
    return value


def _expect_mapping(
    obj: dict[str, Any],
    field: str,
    value_type: type,
    path: Path,
    field_prefix: str = "",
) -> dict[str, Any]:
    """Return ``obj[field]`` as a string-keyed mapping, empty if absent or null."""
    mapping = _expect_type(obj, field, dict, path, field_prefix) or {}
    for key, value in mapping.items():
        if not _is_type(value, value_type):
            raise VocabularyParseError(
                f"field {field_prefix}{field}[{key!r}] must be {value_type.__name__}, "
                f"got {type(value).__name__}",
                model_path=str(path),
            )
    return mapping


def _expect_list_of_str(obj: dict[str, Any], field: str, path: Path) -> None:
    items = _expect_type(obj, field, list, path, field_prefix="model.") or []
    if not all(isinstance(item, str) for item in items):
        raise VocabularyParseError(
            f"field model.{field} must be a list of strings", model_path=str(path)
        )


__all__ = [
    "BINARY_MAGIC",
    "BINARY_VERSION",
    "HEADER_WORDS",
    "VocabFormat",
    "load_binary",
    "load_json_simple",
    "load_json_bpe",
    "detect_format",
]
