"""Bidirectional token <-> id table shared by the encoder and decoder."""

import logging
from typing import Iterable, Iterator

from .byte_codec import base_symbols
from .errors import SpecialTokenError
from .types import MergeRule, Token

log = logging.getLogger(__name__)


class Vocabulary:
    """
    Dense, immutable mapping between token strings and ids in ``[0, len(vocab))``.

    Ids are assigned in a fixed order:

    1. special tokens, in the order given;
    2. the 256 byte symbols, by ascending codepoint;
    3. one id per merge rule, in learned order, bound to ``left + right``.

    Two merge rules may produce the same string (e.g. ``("a", "bc")`` and
    ``("ab", "c")``). Both keep their id so the id space stays dense, and
    :meth:`token_to_id` resolves the string to the earlier one.

    :raises SpecialTokenError: If a special token is repeated, or equals a byte
        symbol or a merge product.
    """

    __slots__ = ("_special_toks", "_merges", "_id_to_token", "_token_to_id")

    def __init__(
        self,
        special_tokens: Iterable[str] = (),
        merges: Iterable[MergeRule] = (),
    ) -> None:
        special_toks = tuple(special_tokens)
        merge_rules = tuple((left, right) for left, right in merges)

        _check_special_tokens(special_toks, merge_rules)

        id_to_token: list[str] = [*special_toks, *base_symbols()]
        id_to_token.extend(left + right for left, right in merge_rules)

        token_to_id: dict[str, Token] = {}
        for tok, seq in enumerate(id_to_token):
            # earlier id wins when a merge product repeats
            token_to_id.setdefault(seq, tok)

        self._special_toks = special_toks
        self._merges = merge_rules
        self._id_to_token = tuple(id_to_token)
        self._token_to_id = token_to_id

        log.debug(
            f"built vocabulary with {len(id_to_token)} tokens "
            f"({len(special_toks)} special, {len(merge_rules)} merges)"
        )

    @property
    def special_tokens(self) -> tuple[str, ...]:
        """Special tokens in id order."""
        return self._special_toks

    @property
    def merges(self) -> tuple[MergeRule, ...]:
        """Merge rules in rank order."""
        return self._merges

    def token_to_id(self, token: str) -> Token | None:
        """Return the id of ``token`` or ``None`` if it is not in the vocabulary."""
        return self._token_to_id.get(token)

    def id_to_token(self, tok: Token) -> str | None:
        """Return the token string for ``tok`` or ``None`` if it is out of range."""
        if 0 <= tok < len(self._id_to_token):
            return self._id_to_token[tok]
        return None

    def is_special(self, tok: Token) -> bool:
        """Whether ``tok`` is the id of a special token."""
        return 0 <= tok < len(self._special_toks)

    def __len__(self) -> int:
        return len(self._id_to_token)

    def __contains__(self, token: object) -> bool:
        return token in self._token_to_id

    def __iter__(self) -> Iterator[str]:
        """Iterate token strings in id order."""
        return iter(self._id_to_token)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(size={len(self)}, "
            f"special={len(self._special_toks)}, merges={len(self._merges)})"
        )


def _check_special_tokens(
    special_toks: tuple[str, ...], merges: tuple[MergeRule, ...]
) -> None:
    """Reject special tokens that would shadow or be shadowed by another entry."""
    seen: set[str] = set()
    duplicates = set()
    for seq in special_toks:
        if not seq:
            raise SpecialTokenError("special tokens must be non-empty strings")
        if seq in seen:
            duplicates.add(seq)
        seen.add(seq)
    if duplicates:
        raise SpecialTokenError("duplicate special tokens", found_tokens=duplicates)

    clashes = seen.intersection(base_symbols())
    if clashes:
        raise SpecialTokenError(
            "special tokens collide with byte symbols", found_tokens=clashes
        )

    clashes = seen.intersection(left + right for left, right in merges)
    if clashes:
        raise SpecialTokenError(
            "special tokens collide with merge products", found_tokens=clashes
        )


__all__ = ["Vocabulary"]
