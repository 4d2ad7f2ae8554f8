"""Text -> token id encoding with rank-ordered merge application."""

import logging
from typing import Final, Iterable

import regex as re

from ._bpe import bigrams, bpe_merge
from .byte_codec import bytes_to_symbols
from .errors import VocabularyError
from .segmenter import Segmenter
from .types import MergeRule, Symbol, Token
from .vocabulary import Vocabulary

log = logging.getLogger(__name__)

# rank of pairs that have no merge rule
_NO_RANK: Final[float] = float("inf")


class Encoder:
    """
    Encodes text into token ids.

    Special tokens are cut out first and map straight to their reserved ids.
    Everything else is segmented, turned into byte symbols and compressed with
    the merge rules in rank order.
    """

    def __init__(
        self,
        merges: Iterable[MergeRule],
        segmenter: Segmenter,
        vocabulary: Vocabulary,
        special_tokens: Iterable[str] = (),
    ) -> None:
        self.merges: tuple[MergeRule, ...] = tuple(merges)
        self.segmenter = segmenter
        self.vocabulary = vocabulary
        self.special_toks: tuple[str, ...] = tuple(special_tokens)

        # byte pair -> rank, the earliest rank wins for repeated rules
        self.merge_ranks: dict[MergeRule, int] = {}
        for rank, pair in enumerate(self.merges):
            self.merge_ranks.setdefault(pair, rank)

        # the capturing group makes re.split() keep the matched special token
        self._special_pats: tuple[re.Pattern[str], ...] = tuple(
            re.compile("(" + re.escape(seq) + ")") for seq in self.special_toks
        )
        log.debug(
            f"encoder ready with {len(self.merges)} merge rules "
            f"and {len(self.special_toks)} special tokens"
        )

    def encode(self, text: str) -> list[Token]:
        """
        Encode text into a sequence of token ids.

        :param text: Text to encode.
        :returns: Token ids in text order.
        :raises VocabularyError: If a produced token has no id, meaning the
            vocabulary and merge rules are out of sync.
        """
        tokens: list[Token] = []
        for chunk, is_special in self.split_special(text):
            if is_special:
                # special token sequences already have a unique token id
                tokens.append(self._lookup(chunk))
            else:
                tokens.extend(self._encode_ordinary(chunk))
        return tokens

    def split_special(self, text: str) -> list[tuple[str, bool]]:
        """
        Partition ``text`` into ``(chunk, is_special)`` pieces.

        Special tokens are applied one after another in registration order,
        each only splitting pieces that are not already special. Empty ordinary
        pieces are dropped.
        """
        chunks: list[tuple[str, bool]] = [(text, False)] if text else []
        for pat in self._special_pats:
            split_chunks: list[tuple[str, bool]] = []
            for chunk, is_special in chunks:
                if is_special:
                    split_chunks.append((chunk, True))
                    continue
                # odd positions hold the captured special token
                for idx, part in enumerate(pat.split(chunk)):
                    if idx % 2:
                        split_chunks.append((part, True))
                    elif part:
                        split_chunks.append((part, False))
            chunks = split_chunks
        return chunks

    def _encode_ordinary(self, text: str) -> list[Token]:
        """Encode text that contains no special tokens."""
        tokens: list[Token] = []
        for chunk in self.segmenter.iter_segments(text):
            symbols = self._apply_bpe_chunk(bytes_to_symbols(chunk.encode("utf-8")))
            tokens.extend(self._lookup(sym) for sym in symbols)
        return tokens

    def _apply_bpe_chunk(self, symbols: list[Symbol]) -> list[Symbol]:
        """
        Apply merge rules to the symbols of one chunk.

        The lowest-rank rule present anywhere in the sequence is applied to all
        of its occurrences, then the search restarts from rank 0. This stops
        once no adjacent pair has a rule.

        :param symbols: Byte symbols of a single chunk.
        :returns: Compressed symbol sequence.
        """
        while len(symbols) >= 2:
            # we dont need frequencies here, only the best ranked pair present
            pair = min(
                bigrams(symbols),
                key=lambda bp: self.merge_ranks.get(bp, _NO_RANK),
            )
            # no pair to merge
            if pair not in self.merge_ranks:
                break
            symbols = bpe_merge(symbols, pair)

        return symbols

    def _lookup(self, token: str) -> Token:
        tok = self.vocabulary.token_to_id(token)
        if tok is None:
            raise VocabularyError(
                "token not found in vocabulary, vocabulary and merge rules are out of sync",
                token=token,
            )
        return tok


__all__ = ["Encoder"]
