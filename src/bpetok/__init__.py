"""bpetok: GPT-2 compatible byte-level BPE tokenization library."""

from .byte_codec import (
    bytes_to_unicode,
    decode_char,
    encode_byte,
    unicode_to_bytes,
)
from .decoder import Decoder
from .encoder import Encoder
from .errors import (
    BpeTokError,
    DecodingError,
    PatternError,
    SpecialTokenError,
    TrainingError,
    VocabularyError,
)
from .segmenter import GPT2_PATTERN, Segmenter
from .tokenizer import Tokenizer
from .trainer import Trainer
from .vocabulary import Vocabulary

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("bpetok")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "Tokenizer",
    "Trainer",
    "Vocabulary",
    "Encoder",
    "Decoder",
    "Segmenter",
    "GPT2_PATTERN",
    "bytes_to_unicode",
    "unicode_to_bytes",
    "encode_byte",
    "decode_char",
    "BpeTokError",
    "DecodingError",
    "PatternError",
    "SpecialTokenError",
    "TrainingError",
    "VocabularyError",
]
