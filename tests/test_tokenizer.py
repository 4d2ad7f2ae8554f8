"""Unit tests for Tokenizer encode/decode, special tokens, and edge cases."""

import pytest

import bpetok as bpt
from bpetok import DecodingError, Encoder, Segmenter, Tokenizer, Trainer, Vocabulary


# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_tokenizer():
    """Return a tokenizer with no merges and no special tokens."""
    return Tokenizer()


@pytest.fixture
def trained_tokenizer():
    """Return a tokenizer trained on a small multilingual corpus."""
    corpus = [
        "Hello, world! How are you? Hello, world! How are you?",
        "I'm fine, thanks! don't won't can't",
        "Hello мир 世界 Hello мир 世界 🦀 Rust 🦀 Rust",
        "123 456 789 123",
    ]
    return Tokenizer.from_trainer(Trainer(60), corpus, ["<|begin|>", "<|end|>"])


# Base byte encoding
# ---------------------------------------------------------------------------


def test_encode_without_merges(plain_tokenizer):
    assert plain_tokenizer.encode("A") == [32]
    assert plain_tokenizer.encode("ABC") == [32, 33, 34]
    assert plain_tokenizer.encode("Hello, world!") == [
        39, 68, 75, 75, 78, 11, 220, 86, 78, 81, 75, 67, 0,
    ]


def test_encode_multibyte_without_merges(plain_tokenizer):
    assert plain_tokenizer.encode("é") == [127, 102]
    assert plain_tokenizer.encode("日") == [162, 245, 98]


def test_decode_without_merges(plain_tokenizer):
    assert plain_tokenizer.decode([32]) == "A"
    assert plain_tokenizer.decode([39, 72]) == "Hi"
    assert plain_tokenizer.decode([127, 102]) == "é"
    assert plain_tokenizer.decode([162, 245, 98]) == "日"


def test_empty_string(plain_tokenizer):
    assert plain_tokenizer.encode("") == []
    assert plain_tokenizer.decode([]) == ""


# Encode-decode round-trip
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text",
    [
        "Hello, world!",
        "Hello 世界",
        "🦀",
        "   \n\t  ",
        "x",
        "\x00\x01\x7f\u00ad control bytes",
        "café naïve 日本語 🎉",
        "Привет, мир! 123",
        "I'm fine, thanks! don't",
    ],
)
def test_round_trip_plain(plain_tokenizer, text):
    assert plain_tokenizer.decode(plain_tokenizer.encode(text)) == text


@pytest.mark.parametrize(
    "text",
    [
        "Hello, world!",
        "Hello, I'm fine!",
        "Hello мир 世界",
        "🦀 Rust",
        "<|begin|>Hello, world!<|end|>",
        "Привет<|end|>123<|begin|>",
        "unseen wörds ✓ and   spacing\n",
    ],
)
def test_round_trip_trained(trained_tokenizer, text):
    assert trained_tokenizer.decode(trained_tokenizer.encode(text)) == text


def test_repetitive_text_creates_merges(trained_tokenizer):
    """Text seen in training compresses below one token per byte."""
    text = "Hello, world! How are you?"
    assert len(trained_tokenizer.encode(text)) < len(text.encode("utf-8"))


# Merge application
# ---------------------------------------------------------------------------


def test_single_merge():
    assert Tokenizer([("a", "b")]).encode("ab") == [256]


def test_merges_apply_in_rank_order():
    """An earlier rule is exhausted before a later one is considered."""
    assert Tokenizer([("a", "b"), ("b", "c")]).encode("abc") == [256, 66]
    assert Tokenizer([("b", "c"), ("a", "b")]).encode("abc") == [64, 256]


def test_duplicate_rule_uses_earliest_rank():
    tok = Tokenizer([("a", "b"), ("b", "c"), ("a", "b")])

    assert tok.encoder.merge_ranks[("a", "b")] == 0
    assert tok.encode("abc") == [256, 66]

    # the duplicate still holds its own id
    assert tok.vocab_size() == 259
    assert tok.vocabulary.id_to_token(258) == "ab"
    assert tok.vocabulary.token_to_id("ab") == 256
    assert tok.decode([258]) == "ab"


def test_merge_replaces_all_non_overlapping_occurrences():
    assert Tokenizer([("a", "a")]).encode("aaa") == [256, 64]
    assert Tokenizer([("a", "a")]).encode("aaaa") == [256, 256]


def test_merge_search_restarts_from_first_rule():
    tok = Tokenizer([("b", "c"), ("a", "a"), ("aa", "bc")])
    assert tok.encode("aabc") == [258]


def test_merges_stay_inside_segments():
    """A rule spanning a word boundary is never applied."""
    tok = Tokenizer([("a", "Ġ")])
    assert tok.encode("a b") == [64, 220, 65]


def test_from_trainer_creates_working_tokenizer():
    tok = Tokenizer.from_trainer(Trainer(1), ["aa aa aa"])
    assert tok.merges == (("a", "a"),)
    assert tok.encode("aa") == [256]


def test_chinese_with_single_merge():
    tok = Tokenizer.from_trainer(Trainer(1), ["世界 世界 世界"])
    ids = tok.encode("世界")
    assert ids == [160, 256, 163, 243, 234]
    assert tok.decode(ids) == "世界"


def test_russian_with_single_merge():
    tok = Tokenizer.from_trainer(Trainer(1), ["Привет Привет"])
    assert tok.encode("Привет") == [140, 253, 141, 222, 140, 116, 140, 256, 113, 141, 224]


# Special tokens
# ---------------------------------------------------------------------------


def test_special_token_ids():
    tok = Tokenizer([], ["<|start|>", "<|end|>"])
    assert tok.encode("<|start|>") == [0]
    assert tok.encode("<|end|>") == [1]


def test_adjacent_special_tokens_are_atomic():
    tok = Tokenizer([], ["<|start|>", "<|end|>"])
    ids = tok.encode("<|start|><|end|>")
    assert ids == [0, 1]
    assert tok.decode(ids) == "<|start|><|end|>"


def test_special_tokens_with_text():
    tok = Tokenizer([], ["<|endoftext|>"])
    assert tok.encode("<|endoftext|>A") == [0, 33]

    tok = Tokenizer([], ["<|start|>", "<|end|>"])
    assert tok.encode("<|start|>test<|end|>") == [0, 85, 70, 84, 85, 1]


def test_special_token_round_trip():
    tok = Tokenizer([], ["<|endoftext|>"])
    text = "<|endoftext|>Hello<|endoftext|>"
    assert tok.decode(tok.encode(text)) == text


def test_special_tokens_split_in_registration_order():
    """Earlier special tokens claim their matches before later ones."""
    assert Tokenizer([], ["<s>", "<s><s>"]).encode("<s><s>") == [0, 0]
    assert Tokenizer([], ["<s><s>", "<s>"]).encode("<s><s>") == [0]


def test_non_ascii_special_token_round_trip():
    tok = Tokenizer([], ["<|é|>", "[PAD] x"])
    text = "a<|é|>b[PAD] x"
    ids = tok.encode(text)
    assert ids[1] == 0 and ids[-1] == 1
    assert tok.decode(ids) == text


def test_from_trainer_with_special_tokens():
    tok = Tokenizer.from_trainer(Trainer(0), ["test"], ["[PAD]"])
    assert tok.encode("[PAD]") == [0]
    assert tok.special_tokens == ("[PAD]",)


def test_special_token_colliding_with_vocabulary_raises():
    with pytest.raises(bpt.SpecialTokenError):
        Tokenizer([("h", "i")], ["hi"])


# Invariant violations
# ---------------------------------------------------------------------------


def test_decode_unknown_id_raises(plain_tokenizer):
    with pytest.raises(bpt.VocabularyError) as exc_info:
        plain_tokenizer.decode([9999])
    assert exc_info.value.invalid_tok == 9999

    with pytest.raises(bpt.VocabularyError):
        plain_tokenizer.decode([-1])


def test_decode_invalid_utf8_raises(plain_tokenizer):
    """A lone UTF-8 lead byte cannot have come from this encoder."""
    with pytest.raises(DecodingError) as exc_info:
        plain_tokenizer.decode([127])
    assert exc_info.value.raw_bytes == b"\xc3"


def test_encoder_out_of_sync_with_vocabulary_raises():
    encoder = Encoder([("a", "b")], Segmenter(), Vocabulary())
    with pytest.raises(bpt.VocabularyError):
        encoder.encode("ab")


def test_errors_share_base_class():
    for exc in (
        bpt.VocabularyError,
        bpt.DecodingError,
        bpt.SpecialTokenError,
        bpt.PatternError,
        bpt.TrainingError,
    ):
        assert issubclass(exc, bpt.BpeTokError)


# Batch encode/decode
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("num_workers", [None, 1, 2, 0])
def test_encode_batch_decode_batch(trained_tokenizer, num_workers):
    """Batch encode and decode match single-text results."""
    texts = ["First.", "Second document.", "<|begin|>Third.<|end|>", "", "世界"]
    encoded = trained_tokenizer.encode_batch(texts, num_workers=num_workers)
    decoded = trained_tokenizer.decode_batch(encoded, num_workers=num_workers)

    assert encoded == [trained_tokenizer.encode(text) for text in texts]
    assert decoded == texts


def test_empty_batch(trained_tokenizer):
    assert trained_tokenizer.encode_batch([]) == []
    assert trained_tokenizer.decode_batch([]) == []


# Vocab size
# ---------------------------------------------------------------------------


def test_vocab_size(trained_tokenizer):
    """Vocabulary holds the specials, 256 byte symbols and one id per merge."""
    assert trained_tokenizer.vocab_size() == 2 + 256 + len(trained_tokenizer.merges)
    assert 0 < len(trained_tokenizer.merges) <= 60
