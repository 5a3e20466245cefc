"""Tokenizer implementations for pre-built vocabularies."""

from .base import Tokenizer
from .greedy import GreedyTokenizer
from .regex import RegexTokenizer


__all__ = ["Tokenizer", "GreedyTokenizer", "RegexTokenizer"]
