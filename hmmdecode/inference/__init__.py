"""Decoding pipeline: Viterbi path to collapsed text message."""

from hmmdecode.inference.engine import (
    DecodeResult,
    collapse_path,
    decode,
    DEFAULT_TRIM_END,
)

__all__ = [
    'DecodeResult',
    'collapse_path',
    'decode',
    'DEFAULT_TRIM_END',
]
