"""VocabTok: text to token-id conversion over pre-built vocabularies."""

from ._models.base import Tokenizer
from ._models.greedy import GreedyTokenizer
from ._models.regex import DEFAULT_PATTERN, SPACE_MARKER, RegexTokenizer
from .factory import (
    decode,
    encode,
    from_pretrained,
    get_tokenizer,
    list_formats,
)
from .loaders import detect_format, load_binary, load_json_bpe, load_json_simple
from .vocab import GPT2_EOT, BPEVocabulary, Vocabulary

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("vocabtok")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "Tokenizer",
    "GreedyTokenizer",
    "RegexTokenizer",
    "Vocabulary",
    "BPEVocabulary",
    "GPT2_EOT",
    "SPACE_MARKER",
    "DEFAULT_PATTERN",
    "load_binary",
    "load_json_simple",
    "load_json_bpe",
    "detect_format",
    "encode",
    "decode",
    "get_tokenizer",
    "from_pretrained",
    "list_formats",
]
