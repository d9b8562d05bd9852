"""Core HMM model, Viterbi algorithms and model I/O."""

from hmmdecode.core.errors import (
    DecodeError,
    MalformedModelError,
    InvalidProbabilityError,
    ObservationOutOfRangeError,
    EmptyInputError,
    DecodeCancelled,
)
from hmmdecode.core.alphabet import Alphabet
from hmmdecode.core.model import HMMModel
from hmmdecode.core.hmm import ViterbiHMM, forward_pass, backtrack, viterbi, log_likelihood
from hmmdecode.core.model_io import load_model, save_model, load_model_with_metadata, load_text_model
