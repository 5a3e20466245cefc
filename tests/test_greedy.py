"""Unit tests for the greedy longest-match tokenizer and its prefix trie."""

import pytest

from vocabtok import GPT2_EOT, GreedyTokenizer, Vocabulary, load_binary, load_json_simple
from vocabtok._match import TokenTrie, slow_longest_prefix
from vocabtok.errors import TokenOutOfRangeError, VocabularyError


@pytest.fixture
def abc_tokenizer(abc_vocab):
    """Return a greedy tokenizer over {"a", "ab", "abc"}."""
    return GreedyTokenizer(abc_vocab)


# Longest match
# ---------------------------------------------------------------------------


def test_longest_match_wins(abc_tokenizer):
    """The longest vocabulary prefix is always taken first."""
    assert abc_tokenizer.encode("abcab") == [2, 1]


def test_falls_back_to_shorter_prefix(abc_tokenizer):
    """When the longer entries do not fit, shorter ones are used."""
    assert abc_tokenizer.encode("aababc") == [0, 1, 2]


def test_unmatched_bytes_become_sentinel(abc_tokenizer):
    """Each byte that starts no entry is one end-of-text id."""
    assert abc_tokenizer.encode("xab") == [GPT2_EOT, 1]
    assert abc_tokenizer.encode("abzz") == [1, GPT2_EOT, GPT2_EOT]


def test_unmatched_multibyte_char_consumes_one_byte_per_sentinel(abc_tokenizer):
    """Units are UTF-8 bytes, so a two-byte character yields two sentinels."""
    assert abc_tokenizer.encode("é") == [GPT2_EOT, GPT2_EOT]


def test_custom_sentinel(abc_vocab):
    """The end-of-text id can be configured per tokenizer."""
    tok = GreedyTokenizer(abc_vocab, eot_token=-1)
    assert tok.encode("?a") == [-1, 0]


def test_empty_text(abc_tokenizer):
    """Empty string encodes to empty list and decodes back."""
    assert abc_tokenizer.encode("") == []
    assert abc_tokenizer.decode([]) == ""


def test_empty_token_never_matches():
    """A zero-length entry cannot be used to make progress."""
    tok = GreedyTokenizer(Vocabulary.from_tokens([b"", b"a"]))
    assert tok.encode("ba") == [GPT2_EOT, 1]


def test_encode_is_deterministic(abc_tokenizer):
    """Identical input always yields identical output."""
    text = "abcabxaab"
    assert abc_tokenizer.encode(text) == abc_tokenizer.encode(text)


# Decode
# ---------------------------------------------------------------------------


def test_decode_concatenates_tokens(abc_tokenizer):
    assert abc_tokenizer.decode([2, 0, 1]) == "abcaab"


@pytest.mark.parametrize(
    "tokens",
    [
        [GPT2_EOT, 2, 1],
        [2, GPT2_EOT, 1],
        [2, 1, GPT2_EOT],
        [GPT2_EOT, 2, GPT2_EOT, GPT2_EOT, 1],
    ],
)
def test_decode_skips_sentinel_anywhere(abc_tokenizer, tokens):
    """The end-of-text id renders nothing and never raises."""
    assert abc_tokenizer.decode(tokens) == "abcab"


def test_decode_skips_sentinel_inside_range():
    """A sentinel that is also a valid index is still skipped."""
    tok = GreedyTokenizer(Vocabulary.from_tokens([b"a", b"b", b"c"]), eot_token=1)
    assert tok.decode([0, 1, 2]) == "ac"


@pytest.mark.parametrize("bad_tok", [3, 999999, -1])
def test_decode_out_of_range_raises(abc_tokenizer, bad_tok):
    """Ids outside the dense table fail as invalid tokens."""
    with pytest.raises(TokenOutOfRangeError, match="invalid token") as exc_info:
        abc_tokenizer.decode([0, bad_tok])
    assert exc_info.value.invalid_tok == bad_tok
    assert exc_info.value.vocab_size == 3


def test_out_of_range_is_vocabulary_error(abc_tokenizer):
    with pytest.raises(VocabularyError):
        abc_tokenizer.decode([42])


def test_decode_bytes_keeps_raw_tokens():
    """Opaque token bytes survive without UTF-8 decoding."""
    tok = GreedyTokenizer(Vocabulary.from_tokens([b"\xe2\x82", b"\xac", b"\xff"]))
    assert tok.decode_bytes([0, 1, 2]) == b"\xe2\x82\xac\xff"
    # split multi-byte characters join back up across tokens
    assert tok.decode([0, 1]) == "€"
    assert tok.decode([2]) == "\ufffd"


def test_decode_strict_errors_raise():
    tok = GreedyTokenizer(Vocabulary.from_tokens([b"\xff"]))
    with pytest.raises(UnicodeDecodeError):
        tok.decode([0], errors="strict")


# Round trips against loaded vocabularies
# ---------------------------------------------------------------------------


def test_binary_vocab_roundtrip(write_binary):
    """Text made of vocabulary entries decodes back to itself."""
    tokens = [b"h", b"e", b"l", b"o", b" ", b"t", b"r", b"hello", b" there", b"the"]
    tok = GreedyTokenizer(load_binary(write_binary(tokens)))

    ids = tok.encode("hello there")
    assert ids == [7, 8]
    assert tok.decode(ids) == "hello there"

    text = "the hello there hell"
    assert tok.decode(tok.encode(text)) == text


def test_json_simple_vocab_roundtrip(write_json):
    """The greedy codec works against the simple JSON scheme."""
    doc = {
        "version": "1.0",
        "model": {"type": "BPE", "vocab": {"hello": 0, "Ġthere": 1, "t": 2}},
    }
    tok = GreedyTokenizer(load_json_simple(write_json(doc)))

    ids = tok.encode("hello there")
    assert ids == [0, 1]
    assert tok.decode(ids) == "hello there"


def test_batch_helpers(abc_tokenizer):
    """Batch encode and decode match single-text results."""
    texts = ["abc", "ab", "aab"]
    encoded = abc_tokenizer.encode_batch(texts)
    assert encoded == [abc_tokenizer.encode(text) for text in texts]
    assert abc_tokenizer.decode_batch(encoded) == texts
    assert abc_tokenizer.encode_batch([]) == []


def test_vocab_size(abc_tokenizer):
    assert abc_tokenizer.vocab_size() == 3


# Trie vs reference search
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("data", "start"),
    [
        (b"abcab", 0),
        (b"abcab", 3),
        (b"abx", 0),
        (b"xabc", 0),
        (b"xabc", 1),
        (b"", 0),
    ],
)
def test_trie_matches_reference(abc_vocab, data, start):
    """The trie finds the same longest prefix as the naive search."""
    trie = TokenTrie(abc_vocab.token_to_id)
    with pytest.deprecated_call():
        expected = slow_longest_prefix(data, abc_vocab.token_to_id, start)
    assert trie.longest_prefix(data, start) == expected


def test_trie_skips_gaps_in_prefix_chain():
    """A longer entry is found even when intermediate prefixes are absent."""
    trie = TokenTrie({b"a": 0, b"abcd": 1})
    assert trie.longest_prefix(b"abcde") == (1, 4)
    assert trie.longest_prefix(b"abce") == (0, 1)
    assert trie.max_len == 4


def test_lone_surrogate_falls_back_to_sentinel(abc_tokenizer):
    """Unpaired surrogates encode as three unmatched bytes instead of raising."""
    assert abc_tokenizer.encode("\ud800ab") == [GPT2_EOT, GPT2_EOT, GPT2_EOT, 1]
