"""
HMM model bundle: parameters plus the observation sequence to decode.

The decoder only reads from an HMMModel. All arrays are copied into
read-only numpy arrays on construction.
"""

from dataclasses import dataclass

import numpy as np

from hmmdecode.core.errors import (
    EmptyInputError,
    InvalidProbabilityError,
    MalformedModelError,
    ObservationOutOfRangeError,
)

# Default tolerance on |sum(row) - 1| for every distribution in the model
DEFAULT_TOL = 1e-4


def _frozen(a, dtype) -> np.ndarray:
    arr = np.array(a, dtype=dtype)
    arr.setflags(write=False)
    return arr


def _as_observations(obs) -> np.ndarray:
    arr = np.asarray(obs)
    if arr.size == 0:
        return _frozen(arr.reshape(-1), np.int64)
    if arr.dtype.kind == 'f':
        # Integral floats (e.g. parsed from text) are accepted as symbols
        if not np.all(np.isfinite(arr)) or not np.all(arr == np.floor(arr)):
            raise MalformedModelError("Observations must be integer symbol indices")
    elif arr.dtype.kind not in 'iub':
        raise MalformedModelError(
            f"Observations must be integer symbol indices, got dtype {arr.dtype}"
        )
    return _frozen(arr.reshape(-1), np.int64)


@dataclass(frozen=True, eq=False)
class HMMModel:
    """
    Discrete HMM parameters and an observation sequence.

    Attributes:
        transmat: (n_states, n_states) transition probabilities, row i -> col j
        emissionprob: (n_states, n_symbols) emission probabilities
        startprob: (n_states,) initial state distribution
        observations: (T,) observed symbol indices in [0, n_symbols)
    """
    transmat: np.ndarray
    emissionprob: np.ndarray
    startprob: np.ndarray
    observations: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'transmat', _frozen(self.transmat, np.float64))
        object.__setattr__(self, 'emissionprob', _frozen(self.emissionprob, np.float64))
        object.__setattr__(self, 'startprob', _frozen(self.startprob, np.float64))
        object.__setattr__(self, 'observations', _as_observations(self.observations))

    @property
    def n_states(self) -> int:
        return int(self.startprob.shape[0]) if self.startprob.ndim == 1 else 0

    @property
    def n_symbols(self) -> int:
        return int(self.emissionprob.shape[1]) if self.emissionprob.ndim == 2 else 0

    @property
    def n_observations(self) -> int:
        return int(self.observations.shape[0])

    def with_observations(self, observations) -> 'HMMModel':
        """Same parameters, different observation sequence."""
        return HMMModel(self.transmat, self.emissionprob, self.startprob, observations)

    def validate(self, tol: float = DEFAULT_TOL) -> 'HMMModel':
        """
        Check every precondition of the decoder.

        Raises the first failure found, in this order: empty input,
        inconsistent shapes, invalid probabilities, distributions that do
        not sum to 1 within tol, observations out of range.

        Returns:
            self, so calls can be chained
        """
        if self.startprob.size == 0:
            raise EmptyInputError("Model has no states")
        if self.emissionprob.size == 0:
            raise EmptyInputError("Model has no observation symbols")
        if self.n_observations == 0:
            raise EmptyInputError("Observation sequence is empty")

        if self.startprob.ndim != 1:
            raise MalformedModelError(
                f"Initial distribution must be a vector, got shape {self.startprob.shape}"
            )
        if self.emissionprob.ndim != 2:
            raise MalformedModelError(
                f"Emission matrix must be 2-D, got shape {self.emissionprob.shape}"
            )
        n = self.n_states
        if self.transmat.shape != (n, n):
            raise MalformedModelError(
                f"Transition matrix has shape {self.transmat.shape}, expected ({n}, {n})"
            )
        if self.emissionprob.shape[0] != n:
            raise MalformedModelError(
                f"Emission matrix has {self.emissionprob.shape[0]} rows, expected {n}"
            )

        for name, arr in (('startprob', self.startprob),
                          ('transmat', self.transmat),
                          ('emissionprob', self.emissionprob)):
            if np.any(np.isnan(arr)):
                raise InvalidProbabilityError(f"{name} contains NaN")
            if np.any(arr < 0) or np.any(arr > 1):
                raise InvalidProbabilityError(
                    f"{name} has values outside [0, 1] "
                    f"(min={arr.min():.6g}, max={arr.max():.6g})"
                )

        if abs(self.startprob.sum() - 1.0) > tol:
            raise MalformedModelError(
                f"Initial distribution sums to {self.startprob.sum():.6g}, expected 1"
            )
        for name, arr in (('Transition', self.transmat), ('Emission', self.emissionprob)):
            row_sums = arr.sum(axis=1)
            bad = np.flatnonzero(np.abs(row_sums - 1.0) > tol)
            if len(bad) > 0:
                i = int(bad[0])
                raise MalformedModelError(
                    f"{name} row {i} sums to {row_sums[i]:.6g}, expected 1"
                )

        self.check_observations()
        return self

    def check_observations(self):
        """Raise ObservationOutOfRangeError unless every symbol is in [0, n_symbols)."""
        obs = self.observations
        m = self.n_symbols
        out_of_range = np.flatnonzero((obs < 0) | (obs >= m))
        if len(out_of_range) > 0:
            t = int(out_of_range[0])
            raise ObservationOutOfRangeError(
                f"Observation {int(obs[t])} at position {t} is outside [0, {m})"
            )
