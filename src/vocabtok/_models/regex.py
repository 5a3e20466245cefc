"""Regex pre-tokenizer plus rank-ordered BPE tokenizer implementation."""

from collections.abc import Iterable, Sequence, Set
from typing import Final, Literal, override

from ..errors import (
    PatternError,
    SpecialTokenError,
    UnknownTokenError,
    UnknownTokenIDError,
)
from ..types import Symbol, Token
from ..vocab import BPEVocabulary

from .base import Tokenizer
from .._bpe import bpe

import regex as re
import logging

# U+0120, stands for a space in GPT-2 style encoder keys
SPACE_MARKER: Final[str] = "Ġ"

# whitespace is the ASCII set [\t\n\f\r ]; other Unicode spaces group with
# punctuation rather than starting a new chunk
DEFAULT_PATTERN: Final[str] = (
    r"'s|'t|'re|'ve|'m|'ll|'d|"
    r" ?\p{L}+|"
    r" ?\p{N}+|"
    r" ?[^\t\n\f\r \p{L}\p{N}]+|"
    r"[\t\n\f\r ]+"
)

log = logging.getLogger(__name__)


class RegexTokenizer(Tokenizer):
    """Tokenizer that splits text using a regex pattern before applying BPE."""

    TOKENIZER_TYPE = "regex"

    def __init__(self, vocab: BPEVocabulary, pattern: str | None = None) -> None:
        """
        Initialize tokenizer with a provided or default split pattern.

        :param vocab: Vocabulary from ``load_json_bpe``.
        :param pattern: Raw regex used to pre-tokenize text. Defaults to
            ``DEFAULT_PATTERN``.
        :raises PatternError: If ``pattern`` does not compile.
        """
        super().__init__()
        self.vocab = vocab
        self.pat = DEFAULT_PATTERN if pattern is None else pattern
        self.compiled_pat: re.Pattern[str] = _compile_pattern(self.pat)
        log.debug(
            f"regex tokenizer ready: {vocab.size} tokens, "
            f"{len(vocab.bpe_ranks)} merge ranks, pattern {self.pat!r}"
        )

    def split(self, text: str) -> list[str]:
        """Split text into the pattern's non-overlapping left-to-right matches."""
        return [m.group(0) for m in self.compiled_pat.finditer(text)]

    def bpe(self, chunk: str) -> list[Symbol]:
        """Apply rank-ordered merges to a single pre-tokenized chunk."""
        return bpe(
            chunk,
            self.vocab.bpe_ranks,
            self.vocab.special_tokens,
            self.vocab.decoder,
        )

    @override
    def encode(
        self,
        text: str,
        allowed_special: Set[str] | Literal["all"] = frozenset(),
    ) -> list[Token]:
        """
        Encode text into a sequence of tokens.

        Every chunk goes through ``bpe`` and each resulting symbol is looked up
        in the encoder, special tokens included. By default special tokens are
        only recognised when the pre-tokenizer yields them as a whole chunk.
        Literals named in ``allowed_special`` are first cut out of the text so
        they are recognised even inside running text, e.g. ``<|endoftext|>``.

        :param text: Text to encode.
        :param allowed_special: Registered special-token literals to cut out of
            the text, or ``"all"`` for every registered one.
        :returns: Encoded token sequence.
        :raises UnknownTokenError: If a symbol is missing from the encoder.
        :raises SpecialTokenError: If ``allowed_special`` names a literal that
            is not a registered special token.
        """
        special_toks = self._allowed_special(allowed_special)
        if not special_toks:
            return self._encode_chunks(self.split(text), text)

        # longest first so a special token never loses to one of its prefixes;
        # the capturing group keeps the matched tokens in the split result
        esc_special_toks = [
            re.escape(seq) for seq in sorted(special_toks, key=len, reverse=True)
        ]
        special_pat = "(" + "|".join(esc_special_toks) + ")"

        tokens: list[Token] = []
        # split() alternates between ordinary text and matched special tokens
        for idx, part in enumerate(re.split(special_pat, text)):
            if idx % 2:
                tokens.extend(self._encode_chunks([part], text))
            elif part:
                tokens.extend(self._encode_chunks(self.split(part), text))

        return tokens

    @override
    def decode(self, tokens: Sequence[Token]) -> str:
        """
        Decode tokens into text.

        Space markers become spaces and the result is stripped of leading and
        trailing whitespace.

        :param tokens: Token sequence to decode.
        :returns: Decoded text.
        :raises UnknownTokenIDError: If any token is missing from the decoder.
        """
        decoder = self.vocab.decoder
        parts: list[str] = []
        for tok in tokens:
            seq = decoder.get(tok)
            if seq is None:
                raise UnknownTokenIDError("unknown token ID", invalid_tok=tok)
            parts.append(seq)

        return "".join(parts).replace(SPACE_MARKER, " ").strip()

    @override
    def vocab_size(self) -> int:
        return self.vocab.size

    def _allowed_special(self, allowed_special: Set[str] | Literal["all"]) -> set[str]:
        registered = self.vocab.special_tokens
        if allowed_special == "all":
            allowed = set(registered)
        else:
            unregistered = {seq for seq in allowed_special if seq not in registered}
            if unregistered:
                raise SpecialTokenError(
                    "allowed special tokens are not registered",
                    found_tokens=unregistered,
                )
            allowed = set(allowed_special)
        # an empty literal would match between every character
        allowed.discard("")
        return allowed

    def _encode_chunks(self, chunks: Iterable[str], text: str) -> list[Token]:
        """Run ``bpe`` on each chunk and map every symbol through the encoder."""
        encoder = self.vocab.encoder
        tokens: list[Token] = []

        for chunk in chunks:
            for symbol in self.bpe(chunk):
                tok = encoder.get(symbol)
                if tok is None:
                    raise UnknownTokenError(symbol, input_text=text)
                tokens.append(tok)

        return tokens


def _compile_pattern(pattern: str) -> re.Pattern:
    """
    Compile and validate a regex pattern.

    :param pattern: Regex pattern string to compile.
    :return: Compiled regex pattern.
    :raises PatternError: If pattern is invalid.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError("invalid regex pattern", pattern=pattern, regex_err=e) from e
