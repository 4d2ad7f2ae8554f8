"""Token id -> text decoding."""

from typing import Iterable

from .byte_codec import unicode_to_bytes
from .errors import DecodingError, VocabularyError
from .types import Token
from .vocabulary import Vocabulary


class Decoder:
    """Exact inverse of :class:`~bpetok.encoder.Encoder` for one vocabulary."""

    def __init__(self, vocabulary: Vocabulary) -> None:
        self.vocabulary = vocabulary

    def decode(self, tokens: Iterable[Token]) -> str:
        """
        Decode a sequence of token ids back into text.

        :param tokens: Token ids produced by an encoder sharing this vocabulary.
        :returns: The original text.
        :raises VocabularyError: If an id is not in the vocabulary.
        :raises DecodingError: If the bytes are not valid UTF-8, which means the
            ids did not come from a matching encoder.
        """
        txt_bytes = b"".join(self.token_bytes(tok) for tok in tokens)
        try:
            return txt_bytes.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodingError(
                "decoded bytes are not valid utf-8", raw_bytes=txt_bytes, reason=e
            ) from e

    def token_bytes(self, tok: Token) -> bytes:
        """Return the raw bytes a single token id stands for."""
        token = self.vocabulary.id_to_token(tok)
        if token is None:
            raise VocabularyError("token not found in vocabulary", invalid_tok=tok)

        if self.vocabulary.is_special(tok):
            # special tokens are stored as literal text, not codec symbols
            return token.encode("utf-8")
        table = unicode_to_bytes()
        try:
            return bytes(table[c] for c in token)
        except KeyError as e:
            raise VocabularyError(
                "token is not made of byte symbols", invalid_tok=tok
            ) from e


__all__ = ["Decoder"]
