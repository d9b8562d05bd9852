"""
hmmdecode model I/O module

Handles reading HMM parameters and observations, and writing decoded paths:
- Text layout: a directory of whitespace-delimited files
  (transitionMatrix.txt, emissionMatrix.txt, initialStateDistribution.txt,
  observations.txt)
- .json: model parameters plus the alphabet (recommended for saving)
- Decoded state paths: one integer per line
"""

import json
import logging
import os
import warnings
from typing import Optional, Tuple

import numpy as np
import pandas as pd

from hmmdecode.core.alphabet import Alphabet
from hmmdecode.core.errors import MalformedModelError
from hmmdecode.core.hmm import ViterbiHMM
from hmmdecode.core.model import HMMModel

logger = logging.getLogger(__name__)

TRANSITION_FILE = 'transitionMatrix.txt'
EMISSION_FILE = 'emissionMatrix.txt'
INITIAL_FILE = 'initialStateDistribution.txt'
OBSERVATIONS_FILE = 'observations.txt'


# =============================================================================
# Text layout
# =============================================================================

def _require_file(filepath: str):
    if not os.path.isfile(filepath):
        raise FileNotFoundError(f"File not found: {filepath}")


def load_text_matrix(filepath: str) -> np.ndarray:
    """
    Load a whitespace-delimited matrix, one row per line.

    Returns:
        2-D float array
    """
    _require_file(filepath)
    try:
        df = pd.read_csv(filepath, sep=r'\s+', header=None, dtype=np.float64)
    except pd.errors.EmptyDataError:
        return np.empty((0, 0), dtype=np.float64)
    except pd.errors.ParserError as e:
        raise MalformedModelError(f"Rows of {filepath} have different lengths: {e}") from e
    except ValueError as e:
        raise MalformedModelError(f"Non-numeric value in {filepath}: {e}") from e
    # Short rows are padded with NaN by the parser
    if df.isna().to_numpy().any():
        raise MalformedModelError(f"Rows of {filepath} have different lengths")
    return df.to_numpy()


def load_text_vector(filepath: str) -> np.ndarray:
    """Load a vector stored one value per line."""
    return load_text_matrix(filepath).ravel()


def load_observations(filepath: str) -> np.ndarray:
    """
    Load observed symbol indices.

    Symbols are whitespace-separated and may span any number of lines.
    """
    _require_file(filepath)
    with open(filepath, 'r') as f:
        tokens = f.read().split()
    try:
        return np.array(tokens, dtype=np.int64)
    except ValueError as e:
        raise MalformedModelError(f"Non-integer observation in {filepath}: {e}") from e


def load_text_model(directory: str,
                    transition_file: str = TRANSITION_FILE,
                    emission_file: str = EMISSION_FILE,
                    initial_file: str = INITIAL_FILE,
                    observations_file: str = OBSERVATIONS_FILE) -> HMMModel:
    """
    Load an HMMModel from a directory in the text layout.

    File names are relative to directory.
    """
    transmat = load_text_matrix(os.path.join(directory, transition_file))
    emissionprob = load_text_matrix(os.path.join(directory, emission_file))
    startprob = load_text_vector(os.path.join(directory, initial_file))
    observations = load_observations(os.path.join(directory, observations_file))

    logger.info("Loaded %d states, %d symbols, %d observations from %s",
                len(startprob), emissionprob.shape[1] if emissionprob.ndim == 2 else 0,
                len(observations), directory)
    return HMMModel(transmat, emissionprob, startprob, observations)


def write_path(path, filepath: str):
    """Write a state path, one integer per line."""
    path = np.asarray(path, dtype=np.int64)
    with open(filepath, 'w') as f:
        if len(path) > 0:
            f.write('\n'.join(map(str, path.tolist())))
            f.write('\n')
    logger.info("Wrote %d states to %s", len(path), filepath)


def read_path(filepath: str) -> np.ndarray:
    """Read a state path written by write_path()."""
    return load_observations(filepath)


# =============================================================================
# JSON model files
# =============================================================================

def load_model(filepath: str) -> ViterbiHMM:
    """Load model parameters from a JSON file."""
    model, _ = load_model_with_metadata(filepath)
    return model


def load_model_with_metadata(filepath: str) -> Tuple[ViterbiHMM, Alphabet]:
    """
    Load model parameters and alphabet from a JSON file.

    Files without an 'alphabet' entry get the default alphabet.

    Returns:
        (model, alphabet)
    """
    _require_file(filepath)
    with open(filepath, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedModelError(f"Model file {filepath} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedModelError(f"Model file {filepath} does not hold a JSON object")

    for key in ('startprob', 'transmat', 'emissionprob'):
        if key not in data:
            raise MalformedModelError(f"Model file {filepath} has no '{key}' entry")

    try:
        model = ViterbiHMM(n_states=data.get('n_states', len(data['startprob'])))
        model.startprob_ = np.array(data['startprob'], dtype=np.float64)
        model.transmat_ = np.array(data['transmat'], dtype=np.float64)
        model.emissionprob_ = np.array(data['emissionprob'], dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise MalformedModelError(f"Model file {filepath} has non-numeric parameters: {e}") from e

    alphabet_text = data.get('alphabet')
    if alphabet_text is None:
        alphabet = Alphabet.default()
    else:
        try:
            alphabet = Alphabet.from_string(alphabet_text)
        except (TypeError, ValueError) as e:
            raise MalformedModelError(f"Model file {filepath} has an invalid alphabet: {e}") from e

    return model, alphabet


def save_model(model: ViterbiHMM, filepath: str, alphabet: Optional[Alphabet] = None):
    """
    Save model parameters to a JSON file.

    If the filepath does not end in .json, the extension is replaced with
    .json and a warning is issued.

    Args:
        model: ViterbiHMM with all parameters set
        filepath: Output path (.json)
        alphabet: Alphabet stored with the model (default alphabet if None)
    """
    if not filepath.endswith('.json'):
        old_path = filepath
        base, _ = os.path.splitext(filepath)
        filepath = base + '.json'
        warnings.warn(
            f"Only JSON format is supported for saving. "
            f"Saving to '{filepath}' instead of '{old_path}'."
        )

    if alphabet is None:
        alphabet = Alphabet.default()

    data = {
        'model_type': 'ViterbiHMM',
        'version': '1.0',
        'n_states': model.n_states,
        'startprob': model.startprob_.tolist(),
        'transmat': model.transmat_.tolist(),
        'emissionprob': model.emissionprob_.tolist(),
        'alphabet': alphabet.to_string(),
    }
    with open(filepath, 'w') as f:
        json.dump(data, f, indent=2)

    return filepath
