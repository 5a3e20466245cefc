"""Greedy longest-match tokenizer over a dense byte vocabulary."""

from collections.abc import Sequence
from typing import override
import logging

from .base import Tokenizer
from .._match import TokenTrie
from ..errors import TokenOutOfRangeError
from ..types import Token
from ..vocab import GPT2_EOT, Vocabulary

log = logging.getLogger(__name__)


class GreedyTokenizer(Tokenizer):
    """
    Tokenizer that repeatedly takes the longest vocabulary entry prefixing
    the remaining input.

    Works on the UTF-8 bytes of the text. A byte that starts no vocabulary
    entry is replaced by the end-of-text id, so encoding never fails but is
    lossy for unmapped input.
    """

    TOKENIZER_TYPE = "greedy"

    def __init__(self, vocab: Vocabulary, eot_token: Token = GPT2_EOT) -> None:
        """
        Initialize a greedy tokenizer.

        :param vocab: Vocabulary from ``load_binary`` or ``load_json_simple``.
        :param eot_token: End-of-text id, emitted for unmatched bytes and
            skipped when decoding.
        """
        super().__init__()
        self.vocab = vocab
        self.eot_token = eot_token
        self._trie = TokenTrie(vocab.token_to_id)
        log.debug(
            f"built prefix trie for {len(vocab.token_to_id)} tokens "
            f"(longest token: {self._trie.max_len} bytes)"
        )

    @override
    def encode(self, text: str) -> list[Token]:
        """
        Encode text with greedy longest-prefix matching.

        :param text: Input text to encode.
        :returns: Encoded token sequence.
        """
        # lone surrogates keep their three UTF-8 style bytes and fall back to
        # the sentinel like any other unmatched input
        data = text.encode("utf-8", errors="surrogatepass")
        tokens: list[Token] = []

        pos = 0
        while pos < len(data):
            match = self._trie.longest_prefix(data, pos)
            if match is None:
                # unmatched leading byte: sentinel and advance by one
                tokens.append(self.eot_token)
                pos += 1
            else:
                tok, length = match
                tokens.append(tok)
                pos += length

        return tokens

    @override
    def decode(self, tokens: Sequence[Token], errors: str = "replace") -> str:
        """
        Decode tokens into text, skipping the end-of-text id.

        :param tokens: Token sequence to decode.
        :param errors: UTF-8 error handler, "replace" or "strict".
        :returns: Decoded text.
        :raises TokenOutOfRangeError: If any other token is outside the vocabulary.
        """
        return self.decode_bytes(tokens).decode("utf-8", errors=errors)

    def decode_bytes(self, tokens: Sequence[Token]) -> bytes:
        """
        Concatenate the raw bytes of each token, skipping the end-of-text id.

        :raises TokenOutOfRangeError: If any other token is outside the vocabulary.
        """
        id_to_token = self.vocab.id_to_token
        size = len(id_to_token)
        parts: list[bytes] = []
        for tok in tokens:
            if tok == self.eot_token:
                continue
            if not 0 <= tok < size:
                raise TokenOutOfRangeError(
                    "invalid token", vocab_size=size, invalid_tok=tok
                )
            parts.append(id_to_token[tok])
        return b"".join(parts)

    @override
    def vocab_size(self) -> int:
        return self.vocab.size
