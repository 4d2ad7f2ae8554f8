"""Pre-segmentation of text into word-like chunks before BPE."""

from typing import Final, Iterator

import regex as re
import logging

from .errors import PatternError

log = logging.getLogger(__name__)

# GPT-2 split pattern: contractions, letter runs, digit runs, "other" runs
# (each with an optional leading space) and finally bare whitespace runs.
# Source: https://github.com/openai/gpt-2/blob/master/src/encoder.py
GPT2_PATTERN: Final[str] = (
    r"'s|'t|'re|'ve|'m|'ll|'d|"
    r" ?\p{L}+|"
    r" ?\p{N}+|"
    r" ?[^\s\p{L}\p{N}]+|"
    r"\s+"
)


class Segmenter:
    """
    Splits text into boundary-respecting chunks.

    Merges are only ever learned and applied inside a single chunk, which keeps
    BPE from fusing symbols across word boundaries. The default pattern covers
    every character, so the chunks always concatenate back to the input.
    """

    def __init__(self, pattern: str | None = None) -> None:
        self.pat: str = GPT2_PATTERN if pattern is None else pattern
        self.compiled_pat: re.Pattern[str] = _compile_pattern(self.pat)
        if pattern is not None:
            log.debug(f"using custom split pattern {pattern!r}")

    def iter_segments(self, text: str) -> Iterator[str]:
        """Yield chunks of ``text`` in order."""
        for m in self.compiled_pat.finditer(text):
            yield m.group(0)

    def segment(self, text: str) -> list[str]:
        """
        Split text into chunks.

        :param text: Text to split; may be empty.
        :returns: Ordered chunks (empty list for empty text).
        """
        return list(self.iter_segments(text))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(pattern={self.pat!r})"


def _compile_pattern(pattern: str) -> re.Pattern[str]:
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


__all__ = ["GPT2_PATTERN", "Segmenter"]
