"""
Core types for tokenization.
"""

type Token = int
type Symbol = str
type MergeRule = tuple[Symbol, Symbol]
type WordFreqs = dict[tuple[Symbol, ...], int]
type PairFreqs = dict[MergeRule, int]
