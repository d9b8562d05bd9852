"""
hmmdecode - Viterbi decoding of discrete Hidden Markov Models
into compressed text messages.
"""

__version__ = "1.0.0"

from hmmdecode.core.alphabet import Alphabet
from hmmdecode.core.hmm import ViterbiHMM, viterbi
from hmmdecode.core.model import HMMModel
from hmmdecode.core.model_io import load_model, save_model, load_text_model
from hmmdecode.inference.engine import DecodeResult, collapse_path, decode
