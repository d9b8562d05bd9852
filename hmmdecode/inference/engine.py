"""hmmdecode decoding engine: Viterbi path to text message."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from hmmdecode.core.alphabet import Alphabet
from hmmdecode.core.hmm import forward_pass, backtrack
from hmmdecode.core.model import HMMModel, DEFAULT_TOL

logger = logging.getLogger(__name__)

# Positions dropped from the end of the path before collapsing
DEFAULT_TRIM_END = 10


@dataclass
class DecodeResult:
    """
    Result of decoding one observation sequence.

    Attributes:
        path: (T,) most likely state sequence (untrimmed)
        message: Collapsed text message
        log_prob: Log probability of path
    """
    path: np.ndarray
    message: str
    log_prob: float


def collapse_path(path, alphabet: Alphabet, trim_end: int = DEFAULT_TRIM_END) -> str:
    """
    Translate a state path into a message, dropping repeated states.

    The last trim_end positions are discarded first. The symbol of the
    first state is always emitted; every later state is emitted only when
    it differs from the state before it.

    Args:
        path: State sequence
        alphabet: State -> symbol table
        trim_end: Positions to drop from the end of path

    Returns:
        Message string; empty only if len(path) <= trim_end
    """
    if trim_end < 0:
        raise ValueError(f"trim_end must be >= 0, got {trim_end}")

    path = np.asarray(path)
    kept = path[:max(len(path) - trim_end, 0)]
    if len(kept) == 0:
        return ''

    # Keep position 0 plus every position whose state changed
    changes = np.empty(len(kept), dtype=bool)
    changes[0] = True
    changes[1:] = kept[1:] != kept[:-1]

    return alphabet.translate(kept[changes])


def decode(model: HMMModel, alphabet: Optional[Alphabet] = None,
           trim_end: int = DEFAULT_TRIM_END,
           validate: bool = True, tol: float = DEFAULT_TOL,
           keep_scores: bool = False,
           cancel: Optional[threading.Event] = None,
           progress: bool = False) -> DecodeResult:
    """
    Decode the model's observations into a text message.

    Runs the Viterbi forward pass, backtracks the optimal path, and
    collapses it through the alphabet.

    Args:
        model: HMM parameters and observations
        alphabet: State -> symbol table (default: a-z plus space)
        trim_end: Positions dropped from the end of the path before collapsing
        validate: Check model preconditions before decoding
        tol: Allowed deviation of each distribution's sum from 1
        keep_scores: Keep the full score table during the forward pass
        cancel: Event checked once per timestep of the forward pass
        progress: Show a progress bar

    Returns:
        DecodeResult
    """
    if alphabet is None:
        alphabet = Alphabet.default()
    if validate:
        model.validate(tol)
    alphabet.check_states(model.n_states)

    start = time.time()
    trellis = forward_pass(model, keep_scores=keep_scores, cancel=cancel,
                           progress=progress)
    t_forward = time.time() - start

    path, log_prob = backtrack(trellis)
    message = collapse_path(path, alphabet, trim_end=trim_end)
    t_total = time.time() - start

    logger.debug("Forward pass %.2fs, total %.2fs", t_forward, t_total)
    logger.info("Decoded %d observations -> %d characters (path log prob %.4f)",
                len(path), len(message), log_prob)

    return DecodeResult(path=path, message=message, log_prob=log_prob)
