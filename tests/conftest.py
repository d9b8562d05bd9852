"""
Shared pytest fixtures for hmmdecode tests.
"""
import os

import numpy as np
import pytest

from hmmdecode.core.alphabet import Alphabet
from hmmdecode.core.model import HMMModel


@pytest.fixture
def toy_model():
    """
    2-state, 2-symbol HMM with a hand-computed Viterbi path.

    Expected path for observations [0, 0, 1, 1] is [0, 0, 1, 1].
    """
    return HMMModel(
        transmat=np.array([[0.9, 0.1], [0.1, 0.9]]),
        emissionprob=np.array([[0.9, 0.1], [0.2, 0.8]]),
        startprob=np.array([0.6, 0.4]),
        observations=np.array([0, 0, 1, 1]),
    )


@pytest.fixture
def ab_alphabet():
    return Alphabet('ab')


@pytest.fixture
def zero_emission_model():
    """
    State 1 emits symbol 0 with certainty and never emits symbol 1.

    Transitions are uniform, so the best path picks the most likely
    emitter at every position: state 1 for symbol 0, state 0 for symbol 1.
    """
    return HMMModel(
        transmat=np.array([[0.5, 0.5], [0.5, 0.5]]),
        emissionprob=np.array([[0.5, 0.5], [1.0, 0.0]]),
        startprob=np.array([0.5, 0.5]),
        observations=np.array([0, 0, 1, 0, 0]),
    )


@pytest.fixture
def letter_model():
    """
    27-state model whose states emit their own index almost surely.

    Observations spell "hello world" with each letter held for three steps.
    """
    n = 27
    transmat = np.full((n, n), 0.2 / (n - 1))
    np.fill_diagonal(transmat, 0.8)
    emissionprob = np.full((n, n), 0.01 / (n - 1))
    np.fill_diagonal(emissionprob, 0.99)
    startprob = np.full(n, 1.0 / n)

    text = "hello world"
    states = [26 if c == ' ' else ord(c) - ord('a') for c in text]
    observations = np.repeat(states, 3)
    return HMMModel(transmat, emissionprob, startprob, observations)


@pytest.fixture
def random_model():
    """Random 5-state, 3-symbol model with 200 observations."""
    rng = np.random.default_rng(42)
    n, m, T = 5, 3, 200
    return HMMModel(
        transmat=rng.dirichlet(np.ones(n), size=n),
        emissionprob=rng.dirichlet(np.ones(m), size=n),
        startprob=rng.dirichlet(np.ones(n)),
        observations=rng.integers(0, m, size=T),
    )


def _write_lines(path, rows):
    with open(path, 'w') as f:
        for row in rows:
            f.write(' '.join(str(v) for v in np.atleast_1d(row)) + '\n')


@pytest.fixture
def text_model_dir(tmp_path, toy_model):
    """Directory holding toy_model in the text layout."""
    _write_lines(tmp_path / 'transitionMatrix.txt', toy_model.transmat)
    _write_lines(tmp_path / 'emissionMatrix.txt', toy_model.emissionprob)
    _write_lines(tmp_path / 'initialStateDistribution.txt', toy_model.startprob)
    with open(tmp_path / 'observations.txt', 'w') as f:
        f.write(' '.join(str(o) for o in toy_model.observations) + '\n')
    return str(tmp_path)
