"""Custom exception hierarchy for vocabtok loading and tokenization errors."""

import regex as re

from ._sanitise import render_token
from .types import Token


class VocabTokError(Exception):
    """Base exception for all vocabtok errors."""


class ModelLoadError(VocabTokError):
    """Raised when loading a vocabulary file fails."""

    def __init__(self, message: str, *, model_path: str | None = None) -> None:
        extra = " "
        if model_path:
            extra += f"(path: {model_path}) "
        super().__init__(message + extra)
        self.model_path = model_path


class VocabularyReadError(ModelLoadError):
    """Raised when a vocabulary file cannot be opened or read."""


class VocabularyFormatError(ModelLoadError):
    """Raised when a binary vocabulary has the wrong magic or version."""

    def __init__(
        self,
        message: str,
        *,
        model_path: str | None = None,
        header: tuple[int, int] | None = None,
    ) -> None:
        """Initialize with optional (magic, version) header words that get appended to the message."""
        if header is not None:
            message = f"{message} (magic: {header[0]}) (version: {header[1]})"
        super().__init__(message, model_path=model_path)
        self.header = header


class VocabularyCorruptionError(ModelLoadError):
    """Raised when a binary vocabulary record is empty or cut short."""

    def __init__(
        self,
        message: str,
        *,
        model_path: str | None = None,
        record: int | None = None,
    ) -> None:
        if record is not None:
            message = f"{message} (record: {record})"
        super().__init__(message, model_path=model_path)
        self.record = record


class VocabularyParseError(ModelLoadError):
    """Raised when a JSON vocabulary is malformed or has the wrong shape."""


class TokenizationError(VocabTokError):
    """Raised when tokenization fails."""

    def __init__(
        self,
        message: str,
        *,
        position: int | None = None,
        input_text: str | None = None,
    ) -> None:
        super().__init__(message)
        self.position = position
        self.input_text = input_text


class UnknownTokenError(TokenizationError):
    """Raised when a BPE symbol has no entry in the encoder."""

    def __init__(self, symbol: str, *, input_text: str | None = None) -> None:
        super().__init__(
            f"unknown token: {render_token(symbol)}", input_text=input_text
        )
        self.symbol = symbol


class VocabularyError(VocabTokError):
    """Raised when vocabulary lookups fail."""

    def __init__(
        self,
        message: str,
        *,
        vocab_size: int | None = None,
        invalid_tok: Token | None = None,
    ) -> None:
        """Initialize with optional token and vocab_size that get appended to the message."""
        extra = " "
        if vocab_size is not None:
            extra += f"(vocab size: {vocab_size}) "
        # zero is a valid token id so compare against None
        if invalid_tok is not None:
            extra += f"(invalid token: {invalid_tok}) "
        super().__init__(message + extra)
        self.vocab_size = vocab_size
        self.invalid_tok = invalid_tok


class UnknownTokenIDError(VocabularyError):
    """Raised when decoding an id missing from the BPE decoder."""


class TokenOutOfRangeError(VocabularyError):
    """Raised when decoding an id outside the dense greedy vocabulary."""


class PatternError(VocabTokError):
    """Raised when compiling and/or validating regex patterns."""

    def __init__(
        self,
        message: str,
        *,
        pattern: str | None = None,
        regex_err: re.error | None = None,
    ) -> None:
        """
        Initialize PatternError with pattern details.

        Args:
            message: Error message.
            pattern: The regex pattern that failed.
            regex_err: The underlying regex error from the regex library.
        """
        extra = " "
        if pattern:
            extra += f"(pattern: {pattern!r}) "
        if regex_err:
            extra += f"(reason: {regex_err}) "
        super().__init__(message + extra)
        self.pattern = pattern
        self.regex_err = regex_err


class SpecialTokenError(VocabTokError):
    """Raised when special token handling fails."""

    def __init__(self, message: str, *, found_tokens: set[str] | None = None) -> None:
        """Initialize with optional found_tokens that get appended to the message."""
        if found_tokens:
            message = f"{message} (found: {', '.join(sorted(found_tokens))})"
        super().__init__(message)
        self.found_tokens = found_tokens


class UnknownFormatError(VocabTokError):
    """Raised when a vocabulary format name is not registered."""

    def __init__(
        self,
        message: str,
        *,
        invalid_name: str | None = None,
        available: list[str] | None = None,
    ) -> None:
        extra = " "
        if invalid_name:
            extra += f"(available: {available}) (got {invalid_name}) "
        super().__init__(message + extra)
        self.invalid_name = invalid_name
        self.available = available
