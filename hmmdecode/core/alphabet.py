"""
Alphabet table mapping hidden-state indices to output symbols.

The default table maps states 0..25 to 'a'..'z' and state 26 to a space.
"""

import string
from typing import Iterable, Iterator, Sequence

import numpy as np

from hmmdecode.core.errors import MalformedModelError

SPACE_INDEX = 26


class Alphabet:
    """
    Immutable state -> symbol table.

    Each state index maps to exactly one single-character symbol and no
    two states share a symbol.
    """

    __slots__ = ('_symbols', '_lookup')

    def __init__(self, symbols: Iterable[str]):
        symbols = tuple(symbols)
        if len(symbols) == 0:
            raise ValueError("Alphabet must contain at least one symbol")
        for s in symbols:
            if not isinstance(s, str) or len(s) != 1:
                raise ValueError(f"Alphabet symbols must be single characters, got {s!r}")
        if len(set(symbols)) != len(symbols):
            raise ValueError(f"Alphabet symbols must be distinct: {''.join(symbols)!r}")
        object.__setattr__(self, '_symbols', symbols)
        # numpy lookup lets translate() index a whole path at once
        object.__setattr__(self, '_lookup', np.array(symbols, dtype='<U1'))

    def __setattr__(self, name, value):
        raise AttributeError("Alphabet is immutable")

    @classmethod
    def default(cls) -> 'Alphabet':
        """'a'..'z' for states 0..25, space for state 26."""
        symbols = list(string.ascii_lowercase)
        symbols.insert(SPACE_INDEX, ' ')
        return cls(symbols)

    @classmethod
    def from_string(cls, text: str) -> 'Alphabet':
        return cls(text)

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Alphabet):
            return NotImplemented
        return self._symbols == other._symbols

    def __hash__(self) -> int:
        return hash(self._symbols)

    def __repr__(self) -> str:
        return f"Alphabet({self.to_string()!r})"

    def to_string(self) -> str:
        return ''.join(self._symbols)

    def symbol(self, state: int) -> str:
        """Symbol for a single state index."""
        if not 0 <= state < len(self._symbols):
            raise MalformedModelError(
                f"State {state} has no symbol in a {len(self._symbols)}-symbol alphabet"
            )
        return self._symbols[state]

    def translate(self, path: Sequence[int]) -> str:
        """Translate a sequence of state indices to a string, symbol by symbol."""
        path = np.asarray(path, dtype=np.int64)
        if path.size == 0:
            return ''
        if path.min() < 0 or path.max() >= len(self._symbols):
            raise MalformedModelError(
                f"Path contains states outside [0, {len(self._symbols)})"
            )
        return ''.join(self._lookup[path].tolist())

    def check_states(self, n_states: int):
        """Raise MalformedModelError unless this alphabet covers exactly n_states."""
        if n_states != len(self._symbols):
            raise MalformedModelError(
                f"Alphabet has {len(self._symbols)} symbols but model has {n_states} states"
            )
