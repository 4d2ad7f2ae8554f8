"""BPE merge learning over a word-frequency table."""

from collections import Counter
import logging
import sys
from typing import Final, Iterable, Mapping

from ._bpe import bpe_merge, update_bpe_freqs
from ._decorators import log_training
from ._sanitise import render_symbol
from .byte_codec import base_symbols, bytes_to_symbols
from .errors import TrainingError
from .segmenter import Segmenter
from .types import MergeRule, PairFreqs, Symbol, Token, WordFreqs

log = logging.getLogger(__name__)

# id used for symbols missing from the tie-break map
_UNKNOWN_ID: Final[int] = sys.maxsize


class Trainer:
    """
    Greedy BPE trainer that learns an ordered list of merge rules.

    Each corpus text is segmented, every chunk is turned into byte symbols, and
    identical chunks share one entry in a word-frequency table. Every iteration
    merges the most frequent adjacent pair across the table.

    Example:
       >>> trainer = Trainer(3)
       >>> trainer.train(["aa bb cc"])
       [('a', 'a'), ('b', 'b'), ('c', 'c')]
    """

    def __init__(
        self,
        max_merges: int,
        verbose: bool = False,
        pattern: str | None = None,
    ) -> None:
        """
        :param max_merges: Upper bound on the number of merge rules to learn.
        :param verbose: Log each learned merge when ``True``.
        :param pattern: Optional custom segmentation pattern.
        :raises TrainingError: If ``max_merges`` is negative.
        """
        if max_merges < 0:
            raise TrainingError(
                "merge budget must be non-negative", max_merges=max_merges
            )
        self.max_merges = max_merges
        self.verbose = verbose
        self.segmenter = Segmenter(pattern)

    @log_training
    def train(self, corpus: str | Iterable[str]) -> list[MergeRule]:
        """
        Learn merge rules from ``corpus``.

        Training never fails. It returns fewer than ``max_merges`` rules when
        every word has collapsed into a single symbol (or the corpus is empty).

        :param corpus: A single text or an iterable of texts.
        :returns: Merge rules in learned order (earliest = highest priority).
        """
        if isinstance(corpus, str):
            corpus = [corpus]

        word_freqs = self._build_word_freqs(corpus)
        log.debug(f"training on {len(word_freqs)} distinct words")

        # running token -> id map, only used to break frequency ties
        base = base_symbols()
        token_ids: dict[Symbol, Token] = {sym: tok for tok, sym in enumerate(base)}

        merges: list[MergeRule] = []
        for i in range(self.max_merges):
            pair_freqs = get_pair_freqs(word_freqs)
            pair = most_frequent_pair(pair_freqs, token_ids)
            # 1. every word compressed to a single symbol
            # 2. corpus too small (or empty) to form enough pairs
            if pair is None:
                log.warning(
                    f"no more pairs to merge after {i} merges "
                    f"(requested {self.max_merges}) stopping early"
                )
                break

            word_freqs = merge_word_freqs(word_freqs, pair)
            merges.append(pair)
            assign_merge_id(token_ids, pair, len(base) + i)

            if self.verbose:
                log.info(
                    f"merge {i + 1}/{self.max_merges}: "
                    f"[{render_symbol(pair[0])}][{render_symbol(pair[1])}] "
                    f"(count {pair_freqs[pair]})"
                )

        return merges

    def _build_word_freqs(self, corpus: Iterable[str]) -> WordFreqs:
        """Count each distinct chunk of the corpus as a tuple of byte symbols."""
        chunk_counts: Counter[str] = Counter()
        for text in corpus:
            chunk_counts.update(self.segmenter.iter_segments(text))

        return {
            tuple(bytes_to_symbols(chunk.encode("utf-8"))): count
            for chunk, count in chunk_counts.items()
        }


def get_pair_freqs(word_freqs: WordFreqs) -> PairFreqs:
    """Tally every adjacent symbol pair, weighted by its word's count."""
    counter: Counter[MergeRule] = Counter()
    for symbols, count in word_freqs.items():
        update_bpe_freqs(symbols, counter, weight=count)
    return dict(counter)


def most_frequent_pair(
    pair_freqs: Mapping[MergeRule, int], token_ids: Mapping[Symbol, Token]
) -> MergeRule | None:
    """
    Pick the pair with the highest count.

    Ties go to the pair whose ``(id(left), id(right))`` is smallest. Symbols
    missing from ``token_ids`` sort after every known id.

    :returns: The winning pair, or ``None`` when ``pair_freqs`` is empty.
    """
    if not pair_freqs:
        return None

    def sort_key(item: tuple[MergeRule, int]) -> tuple[int, int, int, str, str]:
        (left, right), count = item
        return (
            -count,
            token_ids.get(left, _UNKNOWN_ID),
            token_ids.get(right, _UNKNOWN_ID),
            left,
            right,
        )

    return min(pair_freqs.items(), key=sort_key)[0]


def assign_merge_id(
    token_ids: dict[Symbol, Token], pair: MergeRule, tok: Token
) -> Token:
    """
    Record the tie-break id of the product of ``pair``.

    A product that an earlier rule already produced keeps its earlier id, the
    same id :meth:`Vocabulary.token_to_id` resolves it to. Callers still
    advance their id counter per rule, matching the vocabulary layout.

    :returns: The id the product is ranked by.
    """
    return token_ids.setdefault(pair[0] + pair[1], tok)


def merge_word_freqs(word_freqs: WordFreqs, pair: MergeRule) -> WordFreqs:
    """Rebuild the word table with every occurrence of ``pair`` merged."""
    merged: WordFreqs = {}
    for symbols, count in word_freqs.items():
        merged[tuple(bpe_merge(symbols, pair))] = count
    return merged


__all__ = [
    "Trainer",
    "get_pair_freqs",
    "most_frequent_pair",
    "assign_merge_id",
    "merge_word_freqs",
]
