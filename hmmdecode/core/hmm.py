"""
hmmdecode HMM module

Provides:
1. Log-space numeric helpers (safe log, first-maximum predecessor search)
2. Viterbi forward pass building the score and backpointer tables
3. Backtracking of the optimal state path
4. Forward (sum-product) log-likelihood of an observation sequence
5. ViterbiHMM, a parameter container with predict/score methods

All recursions run in log space. A probability of exactly 0 becomes -inf,
which orders below every finite score and never produces NaN when added
to a finite value or to another -inf.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Tuple, Dict, Any

import numpy as np
from scipy.special import logsumexp
from tqdm import tqdm

from hmmdecode.core.errors import EmptyInputError, DecodeCancelled, MalformedModelError
from hmmdecode.core.model import HMMModel, DEFAULT_TOL

logger = logging.getLogger(__name__)


# =============================================================================
# Numeric helpers
# =============================================================================

def safe_log(p) -> np.ndarray:
    """Natural log with log(0) = -inf and no divide-by-zero warning."""
    with np.errstate(divide='ignore'):
        return np.log(np.asarray(p, dtype=np.float64))


def best_predecessors(prev_scores: np.ndarray,
                      log_transmat: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Best predecessor of every target state for one Viterbi step.

    For each target state j this computes
    max_i (prev_scores[i] + log_transmat[i, j]) and the i attaining it.
    Ties go to the lowest source index. A target whose candidates are all
    -inf gets value -inf and predecessor 0.

    Args:
        prev_scores: (n_states,) scores of the previous timestep
        log_transmat: (n_states, n_states) log transition matrix

    Returns:
        best_values: (n_states,) best score reaching each target state
        best_indices: (n_states,) predecessor state achieving it
    """
    # candidates[i, j]: score of arriving in j from i
    candidates = prev_scores[:, np.newaxis] + log_transmat
    # np.argmax returns the first occurrence of the maximum
    best_indices = np.argmax(candidates, axis=0)
    best_values = candidates[best_indices, np.arange(candidates.shape[1])]
    return best_values, best_indices


def _check_decodable(model: HMMModel, what: str):
    """
    Minimal checks every recursion needs, even on unvalidated models.

    Raises EmptyInputError for no states, symbols or observations, and
    ObservationOutOfRangeError for symbols outside [0, n_symbols). Negative
    symbols would otherwise index emission columns from the end.
    """
    if model.n_states == 0:
        raise EmptyInputError(f"Cannot run the {what} on a model with no states")
    if model.n_symbols == 0:
        raise EmptyInputError(f"Cannot run the {what} on a model with no observation symbols")
    if model.n_observations == 0:
        raise EmptyInputError(f"Cannot run the {what} on an empty observation sequence")
    model.check_observations()


# =============================================================================
# Viterbi forward pass and backtrack
# =============================================================================

@dataclass
class Trellis:
    """
    Output of the Viterbi forward pass.

    Tables are time-major: row t holds every state's value at timestep t.

    Attributes:
        scores: (T, n_states) best log-probability of any path ending in
            each state at each timestep, or None if only the last row was kept
        final_scores: (n_states,) scores at the last timestep
        backpointers: (T, n_states) predecessor state at t-1; row 0 is -1
    """
    scores: Optional[np.ndarray]
    final_scores: np.ndarray
    backpointers: np.ndarray

    @property
    def n_observations(self) -> int:
        return int(self.backpointers.shape[0])


def forward_pass(model: HMMModel, keep_scores: bool = True,
                 cancel: Optional[threading.Event] = None,
                 progress: bool = False) -> Trellis:
    """
    Viterbi forward recursion in log space.

    Each timestep depends only on the previous one. With keep_scores=False
    the full score table is not stored and only the previous row is held,
    which keeps memory at O(n_states) for scores; backpointers are always
    stored in full.

    Args:
        model: HMM parameters and observations; shapes and sums are assumed
            validated, symbol range is always checked
        keep_scores: Store the whole (T, n_states) score table
        cancel: Checked once per timestep; DecodeCancelled is raised when set
        progress: Show a progress bar over timesteps

    Returns:
        Trellis with scores, final_scores and backpointers
    """
    obs = model.observations
    T = len(obs)
    n = model.n_states
    _check_decodable(model, 'forward pass')
    logger.debug("Forward pass: %d states, %d observations, keep_scores=%s",
                 n, T, keep_scores)

    log_startprob = safe_log(model.startprob)
    log_transmat = safe_log(model.transmat)
    # (n_symbols, n_states): one contiguous row per observed symbol
    log_emit_by_symbol = np.ascontiguousarray(safe_log(model.emissionprob).T)

    backpointers = np.empty((T, n), dtype=np.int32)
    backpointers[0] = -1
    scores = np.empty((T, n), dtype=np.float64) if keep_scores else None

    current = log_startprob + log_emit_by_symbol[obs[0]]
    if scores is not None:
        scores[0] = current

    timesteps = tqdm(range(1, T), desc="Viterbi", unit="obs",
                     leave=False, disable=not progress)
    for t in timesteps:
        if cancel is not None and cancel.is_set():
            raise DecodeCancelled(f"Decoding cancelled at timestep {t} of {T}")

        best_values, best_indices = best_predecessors(current, log_transmat)
        current = best_values + log_emit_by_symbol[obs[t]]
        backpointers[t] = best_indices
        if scores is not None:
            scores[t] = current

    return Trellis(scores=scores, final_scores=current, backpointers=backpointers)


def backtrack(trellis: Trellis) -> Tuple[np.ndarray, float]:
    """
    Recover the optimal state path from a completed trellis.

    The final state is the first maximum of the last row of scores; the
    running maximum starts from state 0's score, not from zero.

    Returns:
        path: (T,) most likely state sequence
        log_prob: Log probability of that path
    """
    T = trellis.n_observations
    if T == 0:
        raise EmptyInputError("Cannot backtrack an empty trellis")

    final_scores = trellis.final_scores
    last_state = int(np.argmax(final_scores))
    log_prob = float(final_scores[last_state])

    backpointers = trellis.backpointers
    path = np.empty(T, dtype=np.int32)
    path[-1] = last_state
    for t in range(T - 2, -1, -1):
        path[t] = backpointers[t + 1, path[t + 1]]

    return path, log_prob


def viterbi(model: HMMModel, keep_scores: bool = False,
            cancel: Optional[threading.Event] = None,
            progress: bool = False) -> Tuple[np.ndarray, float]:
    """
    Most likely hidden-state path for the model's observations.

    Returns:
        path: (T,) state sequence
        log_prob: Log probability of the path (-inf if no path is feasible)
    """
    trellis = forward_pass(model, keep_scores=keep_scores, cancel=cancel,
                           progress=progress)
    return backtrack(trellis)


# =============================================================================
# Forward algorithm (sequence likelihood)
# =============================================================================

def log_likelihood(model: HMMModel, progress: bool = False) -> float:
    """
    Log probability of the observations summed over all state paths.

    Always >= the Viterbi path log probability.
    """
    obs = model.observations
    T = len(obs)
    _check_decodable(model, 'forward algorithm')

    log_transmat = safe_log(model.transmat)
    log_emit_by_symbol = np.ascontiguousarray(safe_log(model.emissionprob).T)

    alpha = safe_log(model.startprob) + log_emit_by_symbol[obs[0]]
    with np.errstate(divide='ignore', invalid='ignore'):
        for t in tqdm(range(1, T), desc="Forward", unit="obs",
                      leave=False, disable=not progress):
            alpha = logsumexp(alpha[:, np.newaxis] + log_transmat, axis=0) \
                + log_emit_by_symbol[obs[t]]
        return float(logsumexp(alpha))


# =============================================================================
# Parameter container
# =============================================================================

class ViterbiHMM:
    """
    Discrete HMM parameters for Viterbi decoding.

    Attribute names follow the usual hmmlearn convention (startprob_,
    transmat_, emissionprob_). Parameters are fixed; there is no training.
    """

    def __init__(self, n_states: int = 27):
        self.n_states = n_states
        self.startprob_: Optional[np.ndarray] = None
        self.transmat_: Optional[np.ndarray] = None
        self.emissionprob_: Optional[np.ndarray] = None

    @property
    def n_symbols(self) -> int:
        return 0 if self.emissionprob_ is None else int(self.emissionprob_.shape[1])

    def to_model(self, X: np.ndarray) -> HMMModel:
        """Bundle these parameters with an observation sequence."""
        if self.startprob_ is None or self.transmat_ is None or self.emissionprob_ is None:
            raise MalformedModelError(
                "ViterbiHMM needs startprob_, transmat_ and emissionprob_ before decoding"
            )
        obs = np.asarray(X).flatten()
        return HMMModel(self.transmat_, self.emissionprob_, self.startprob_, obs)

    def predict_with_score(self, X: np.ndarray, validate: bool = True,
                           tol: float = DEFAULT_TOL) -> Tuple[np.ndarray, float]:
        """
        Most likely state sequence and its log probability.

        Args:
            X: Observation sequence, shape (T, 1) or (T,)
            validate: Check model and observations before decoding
            tol: Allowed deviation of each distribution's sum from 1

        Returns:
            path: State sequence, shape (T,)
            log_prob: Log probability of the path
        """
        model = self.to_model(X)
        if validate:
            model.validate(tol)
        return viterbi(model)

    def predict(self, X: np.ndarray, validate: bool = True) -> np.ndarray:
        """Most likely state sequence, shape (T,)."""
        path, _ = self.predict_with_score(X, validate=validate)
        return path

    def score(self, X: np.ndarray, validate: bool = True) -> float:
        """Log probability of the observation sequence."""
        model = self.to_model(X)
        if validate:
            model.validate()
        return log_likelihood(model)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize parameters to a dictionary."""
        return {
            'n_states': self.n_states,
            'startprob_': self.startprob_.tolist() if self.startprob_ is not None else None,
            'transmat_': self.transmat_.tolist() if self.transmat_ is not None else None,
            'emissionprob_': self.emissionprob_.tolist() if self.emissionprob_ is not None else None,
            'model_type': 'ViterbiHMM',
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'ViterbiHMM':
        """Deserialize parameters from a dictionary."""
        model = cls(n_states=d.get('n_states', 27))
        if d.get('startprob_') is not None:
            model.startprob_ = np.array(d['startprob_'], dtype=np.float64)
        if d.get('transmat_') is not None:
            model.transmat_ = np.array(d['transmat_'], dtype=np.float64)
        if d.get('emissionprob_') is not None:
            model.emissionprob_ = np.array(d['emissionprob_'], dtype=np.float64)
        return model

    @classmethod
    def from_model(cls, model: HMMModel) -> 'ViterbiHMM':
        """Parameters of an HMMModel, without its observations."""
        hmm = cls(n_states=model.n_states)
        hmm.startprob_ = np.array(model.startprob)
        hmm.transmat_ = np.array(model.transmat)
        hmm.emissionprob_ = np.array(model.emissionprob)
        return hmm
