"""
Tests for hmmdecode.core.alphabet.
"""
import numpy as np
import pytest

from hmmdecode.core.alphabet import Alphabet, SPACE_INDEX
from hmmdecode.core.errors import MalformedModelError


class TestDefaultAlphabet:
    def test_size(self):
        assert len(Alphabet.default()) == 27

    def test_letters(self):
        alphabet = Alphabet.default()
        assert alphabet.symbol(0) == 'a'
        assert alphabet.symbol(25) == 'z'

    def test_space(self):
        assert Alphabet.default().symbol(SPACE_INDEX) == ' '

    def test_to_string(self):
        assert Alphabet.default().to_string() == 'abcdefghijklmnopqrstuvwxyz '


class TestAlphabet:
    def test_translate(self):
        alphabet = Alphabet('ab')
        assert alphabet.translate([0, 1, 1, 0]) == 'abba'

    def test_translate_numpy(self):
        alphabet = Alphabet.default()
        path = np.array([7, 8, 26, 23], dtype=np.int32)
        assert alphabet.translate(path) == 'hi x'

    def test_translate_empty(self):
        assert Alphabet('ab').translate([]) == ''

    def test_translate_out_of_range(self):
        with pytest.raises(MalformedModelError):
            Alphabet('ab').translate([0, 2])

    def test_symbol_out_of_range(self):
        with pytest.raises(MalformedModelError):
            Alphabet('ab').symbol(-1)

    def test_equality(self):
        assert Alphabet('ab') == Alphabet.from_string('ab')
        assert Alphabet('ab') != Alphabet('ba')
        assert len({Alphabet('ab'), Alphabet('ab')}) == 1

    def test_iteration(self):
        assert list(Alphabet('xyz')) == ['x', 'y', 'z']

    def test_immutable(self):
        alphabet = Alphabet('ab')
        with pytest.raises(AttributeError):
            alphabet._symbols = ('c',)

    @pytest.mark.parametrize("symbols", ['', 'aa', ['a', 'bc']])
    def test_invalid_symbols(self, symbols):
        with pytest.raises(ValueError):
            Alphabet(symbols)

    def test_check_states(self):
        Alphabet('ab').check_states(2)
        with pytest.raises(MalformedModelError):
            Alphabet.default().check_states(2)
