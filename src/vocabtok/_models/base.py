"""
Base tokenizer interface shared by the greedy and regex BPE implementations.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..types import Token

log = logging.getLogger(__name__)


class Tokenizer(ABC):
    """
    Abstract base class for tokenizers over a pre-built vocabulary.

    Tokenizers hold only read-only tables after construction, so one
    instance may be shared by concurrent callers.
    """

    TOKENIZER_TYPE: str = "base"

    @abstractmethod
    def encode(self, text: str) -> list[Token]:
        """Encode text into a sequence of tokens."""
        ...

    @abstractmethod
    def decode(self, tokens: Sequence[Token]) -> str:
        """Decode a sequence of tokens back into text."""
        ...

    @abstractmethod
    def vocab_size(self) -> int:
        """Return the number of tokens in the vocabulary."""
        ...

    def encode_batch(self, texts: list[str]) -> list[list[Token]]:
        """Encode multiple texts one after another, in input order."""
        if not texts:
            return []
        log.debug(f"encoding batch of {len(texts)} texts")
        return [self.encode(text) for text in texts]

    def decode_batch(self, token_batch: list[Sequence[Token]]) -> list[str]:
        """Decode multiple token sequences one after another, in input order."""
        if not token_batch:
            return []
        log.debug(f"decoding batch of {len(token_batch)} sequences")
        return [self.decode(tokens) for tokens in token_batch]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.TOKENIZER_TYPE!r}, vocab_size={self.vocab_size()})"
