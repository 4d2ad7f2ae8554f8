"""
Core Byte Pair Encoding (BPE) operations shared by training and encoding.
"""

from collections import Counter
from typing import Sequence

from .types import MergeRule, Symbol


def bpe_merge(symbols: Sequence[Symbol], target: MergeRule) -> list[Symbol]:
    """
    Merge all occurrences of a target symbol pair into a single new symbol.

    Occurrences are replaced left to right and never overlap, so merging
    ``("a", "a")`` into ``["a", "a", "a"]`` gives ``["aa", "a"]``.
    """
    left, right = target
    merged = left + right
    newsyms: list[Symbol] = []

    i = 0
    n = len(symbols)
    while i < n:
        # check if we can form a pair and it matches the target
        if i < n - 1 and symbols[i] == left and symbols[i + 1] == right:
            newsyms.append(merged)
            i += 2
        else:
            newsyms.append(symbols[i])
            i += 1

    return newsyms


def update_bpe_freqs(
    symbols: Sequence[Symbol],
    counter: Counter[MergeRule],
    weight: int = 1,
) -> None:
    """
    Add every adjacent pair of ``symbols`` to ``counter``.

    :param symbols: Symbol sequence of one word.
    :param counter: Pair tally updated in place.
    :param weight: Amount added per occurrence (the word's corpus count).
    """
    for pair in zip(symbols, symbols[1:]):
        counter[pair] += weight


def bigrams(symbols: list[Symbol]) -> set[MergeRule]:
    """Return the distinct adjacent pairs in ``symbols``."""
    return set(zip(symbols, symbols[1:]))
