"""
Byte-level BPE tokenizer combining segmentation, vocabulary, encoding and decoding.
"""

from concurrent.futures import ThreadPoolExecutor
from math import ceil
from typing import TYPE_CHECKING, Callable, Iterable, Sequence
import logging
import os

from .decoder import Decoder
from .encoder import Encoder
from .segmenter import Segmenter
from .types import MergeRule, Token
from .vocabulary import Vocabulary

if TYPE_CHECKING:
    from .trainer import Trainer

log = logging.getLogger(__name__)


class Tokenizer:
    """
    GPT-2 style byte-level BPE tokenizer.

    Built from an ordered list of merge rules and a list of special tokens. All
    state is immutable after construction, so one instance can be shared by
    many threads.

    Example:
       >>> tok = Tokenizer([("h", "e")], ["<|endoftext|>"])
       >>> ids = tok.encode("hello<|endoftext|>")
       >>> tok.decode(ids)
       'hello<|endoftext|>'
    """

    def __init__(
        self,
        merges: Iterable[MergeRule] = (),
        special_tokens: Iterable[str] = (),
        pattern: str | None = None,
    ) -> None:
        """
        :param merges: Merge rules in rank order.
        :param special_tokens: Atomic strings that get the lowest ids.
        :param pattern: Optional custom segmentation pattern.
        :raises SpecialTokenError: If a special token clashes with the vocabulary.
        :raises PatternError: If ``pattern`` is not a valid regex.
        """
        self.segmenter = Segmenter(pattern)
        self.vocabulary = Vocabulary(special_tokens, merges)
        self.encoder = Encoder(
            self.vocabulary.merges,
            self.segmenter,
            self.vocabulary,
            self.vocabulary.special_tokens,
        )
        self.decoder = Decoder(self.vocabulary)

    @classmethod
    def from_trainer(
        cls,
        trainer: "Trainer",
        corpus: str | Iterable[str],
        special_tokens: Iterable[str] = (),
    ) -> "Tokenizer":
        """
        Train merge rules on ``corpus`` and build a tokenizer from them.

        The tokenizer segments text with the same pattern the trainer used.
        """
        merges = trainer.train(corpus)
        log.info(f"learned {len(merges)} merge rules")
        return cls(merges, special_tokens, pattern=trainer.segmenter.pat)

    @property
    def merges(self) -> tuple[MergeRule, ...]:
        return self.vocabulary.merges

    @property
    def special_tokens(self) -> tuple[str, ...]:
        return self.vocabulary.special_tokens

    def vocab_size(self) -> int:
        """Return the number of tokens in the vocabulary."""
        return len(self.vocabulary)

    def encode(self, text: str) -> list[Token]:
        """Encode text into a sequence of token ids."""
        return self.encoder.encode(text)

    def decode(self, tokens: Iterable[Token]) -> str:
        """
        Decode a sequence of token ids back into text.

        :raises VocabularyError: If any token id is not in the vocabulary.
        :raises DecodingError: If the ids do not decode to valid UTF-8.
        """
        return self.decoder.decode(tokens)

    def encode_batch(
        self, texts: Sequence[str], num_workers: int | None = None
    ) -> list[list[Token]]:
        """
        Encode many texts, optionally on a thread pool.

        :param texts: Text inputs to encode.
        :param num_workers: Worker count; ``None`` uses the cpu count and values
            below 1 mean a single worker.
        :returns: Encoded token sequences in input order.
        """
        return _map_batch(self.encode, texts, num_workers)

    def decode_batch(
        self, token_batch: Sequence[Sequence[Token]], num_workers: int | None = None
    ) -> list[str]:
        """Decode many token sequences, optionally on a thread pool."""
        return _map_batch(self.decode, token_batch, num_workers)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(vocab_size={self.vocab_size()}, "
            f"merges={len(self.merges)}, special_tokens={list(self.special_tokens)})"
        )


def _map_batch[T, R](
    func: Callable[[T], R], items: Sequence[T], num_workers: int | None
) -> list[R]:
    """Apply ``func`` to every item, in grouped parallel tasks when worthwhile."""
    if not items:
        return []

    # delegate groups of items among worker threads
    if num_workers is None:
        workers = os.cpu_count() or 1
    else:
        workers = max(1, num_workers)  # "0" interpreted as 1 worker

    if workers == 1 or len(items) <= 1:
        return [func(item) for item in items]

    # group items to reduce task-scheduling overhead when the input
    # contains many documents
    target_tasks = min(len(items), workers * 2)
    group_size = max(1, ceil(len(items) / target_tasks))
    groups = [items[idx : idx + group_size] for idx in range(0, len(items), group_size)]

    def process_group(group: Sequence[T]) -> list[R]:
        return [func(item) for item in group]

    log.debug(f"processing {len(items)} items in {len(groups)} groups on {workers} workers")
    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(process_group, groups))
    return [out for group in results for out in group]


__all__ = ["Tokenizer"]
