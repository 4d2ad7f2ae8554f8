"""Custom exception hierarchy for bpetok tokenization errors."""

import regex as re

from .types import Token


class BpeTokError(Exception):
    """Base exception for all bpetok errors."""


class SpecialTokenError(BpeTokError):
    """Raised when a special token configuration is rejected."""

    def __init__(self, message: str, *, found_tokens: set[str] | None = None) -> None:
        """Initialize with optional found_tokens that get appended to the message."""
        if found_tokens:
            message = f"{message} (found: {', '.join(sorted(found_tokens))})"
        super().__init__(message)
        self.found_tokens = found_tokens


class VocabularyError(BpeTokError):
    """
    Raised when a token or id is missing from the vocabulary.

    This always means the vocabulary and the merge rules (or the ids being
    decoded) are out of sync.
    """

    def __init__(
        self,
        message: str,
        *,
        invalid_tok: Token | None = None,
        token: str | None = None,
    ) -> None:
        """Initialize with optional id or token string that get appended to the message."""
        extra = " "
        # decoding: id not in vocab
        if invalid_tok is not None:
            extra += f"(invalid token: {invalid_tok}) "
        # encoding: symbol not in vocab
        if token is not None:
            extra += f"(token: {token!r}) "
        super().__init__(message + extra)
        self.invalid_tok = invalid_tok
        self.token = token


class DecodingError(BpeTokError):
    """Raised when decoded bytes do not form valid UTF-8."""

    def __init__(
        self,
        message: str,
        *,
        raw_bytes: bytes | None = None,
        reason: UnicodeDecodeError | None = None,
    ) -> None:
        extra = " "
        if reason is not None:
            extra += f"(reason: {reason}) "
        super().__init__(message + extra)
        self.raw_bytes = raw_bytes
        self.reason = reason


class TrainingError(BpeTokError):
    """Raised when a trainer is configured with invalid parameters."""

    def __init__(self, message: str, *, max_merges: int | None = None) -> None:
        extra = " "
        if max_merges is not None:
            extra += f"(max merges: {max_merges}) "
        super().__init__(message + extra)
        self.max_merges = max_merges


class PatternError(BpeTokError):
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
