"""
Immutable vocabulary tables shared by the loaders and tokenizers.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final

from .types import MergeRanks, Token, TokenBytes

# reserved end-of-text id of the GPT-2 vocabulary
GPT2_EOT: Final[Token] = 50256

log = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False, slots=True)
class Vocabulary:
    """
    Dense token table used by the greedy longest-match tokenizer.

    Ids are positions in ``id_to_token``. ``token_to_id`` is built by walking
    the table in id order, so a token string that appears more than once maps
    to its last id.
    """

    id_to_token: tuple[TokenBytes, ...]
    token_to_id: Mapping[TokenBytes, Token]

    @classmethod
    def from_tokens(cls, tokens: Iterable[TokenBytes]) -> "Vocabulary":
        """Build a vocabulary whose ids are the positions of ``tokens``."""
        id_to_token = tuple(tokens)
        token_to_id: dict[TokenBytes, Token] = {}
        for tok, seq in enumerate(id_to_token):
            token_to_id[seq] = tok

        n_dupes = len(id_to_token) - len(token_to_id)
        if n_dupes:
            log.debug(f"{n_dupes} duplicate token strings resolved to their last id")

        return cls(id_to_token, MappingProxyType(token_to_id))

    @property
    def size(self) -> int:
        """Number of token ids, duplicates included."""
        return len(self.id_to_token)

    def __len__(self) -> int:
        return len(self.id_to_token)

    def __contains__(self, seq: object) -> bool:
        return seq in self.token_to_id


@dataclass(frozen=True, eq=False, slots=True)
class BPEVocabulary:
    """
    Encoder, merge ranks and special tokens used by the regex BPE tokenizer.

    ``bpe_ranks`` keys are the two symbols of a pair joined by a comma.
    """

    encoder: Mapping[str, Token]
    decoder: Mapping[Token, str]
    bpe_ranks: Mapping[str, int]
    special_tokens: Mapping[str, Token]

    @classmethod
    def from_tables(
        cls,
        encoder: dict[str, Token],
        bpe_ranks: MergeRanks,
        special_tokens: dict[str, Token],
    ) -> "BPEVocabulary":
        """Build a vocabulary, deriving ``decoder`` as the inverse of ``encoder``."""
        # ids shared by several strings resolve to the last one, as in encoder order
        decoder = {tok: seq for seq, tok in encoder.items()}
        return cls(
            encoder=MappingProxyType(dict(encoder)),
            decoder=MappingProxyType(decoder),
            bpe_ranks=MappingProxyType(dict(bpe_ranks)),
            special_tokens=MappingProxyType(dict(special_tokens)),
        )

    @property
    def size(self) -> int:
        """Number of encoder entries."""
        return len(self.encoder)

    def __len__(self) -> int:
        return len(self.encoder)


__all__ = ["GPT2_EOT", "Vocabulary", "BPEVocabulary"]
