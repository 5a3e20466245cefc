"""
Core types for tokenization.
"""

type Token = int
type TokenBytes = bytes
type Symbol = str
type SymbolPair = tuple[Symbol, Symbol]
type MergeRanks = dict[str, int]
