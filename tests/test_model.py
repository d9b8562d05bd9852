"""
Tests for hmmdecode.core.model: HMMModel construction and validation.
"""
import numpy as np
import pytest

from hmmdecode.core.errors import (
    DecodeError,
    EmptyInputError,
    InvalidProbabilityError,
    MalformedModelError,
    ObservationOutOfRangeError,
)
from hmmdecode.core.model import HMMModel


def _model(**overrides):
    params = dict(
        transmat=np.array([[0.9, 0.1], [0.1, 0.9]]),
        emissionprob=np.array([[0.9, 0.1], [0.2, 0.8]]),
        startprob=np.array([0.6, 0.4]),
        observations=np.array([0, 0, 1, 1]),
    )
    params.update(overrides)
    return HMMModel(**params)


class TestConstruction:
    def test_dimensions(self, toy_model):
        assert toy_model.n_states == 2
        assert toy_model.n_symbols == 2
        assert toy_model.n_observations == 4

    def test_arrays_are_read_only(self, toy_model):
        with pytest.raises(ValueError):
            toy_model.transmat[0, 0] = 0.5
        with pytest.raises(ValueError):
            toy_model.observations[0] = 1

    def test_caller_arrays_not_shared(self):
        transmat = np.array([[0.9, 0.1], [0.1, 0.9]])
        model = _model(transmat=transmat)
        transmat[0, 0] = 0.0
        assert model.transmat[0, 0] == 0.9

    def test_frozen(self, toy_model):
        with pytest.raises(Exception):
            toy_model.startprob = np.array([0.5, 0.5])

    def test_lists_accepted(self):
        model = HMMModel([[1.0]], [[0.5, 0.5]], [1.0], [0, 1, 1])
        assert model.observations.dtype == np.int64
        assert model.n_symbols == 2

    def test_integral_float_observations(self):
        model = _model(observations=np.array([0.0, 1.0, 1.0]))
        np.testing.assert_array_equal(model.observations, [0, 1, 1])

    def test_fractional_observations_rejected(self):
        with pytest.raises(MalformedModelError):
            _model(observations=np.array([0.0, 0.5]))

    def test_string_observations_rejected(self):
        with pytest.raises(MalformedModelError):
            _model(observations=np.array(['a', 'b']))

    def test_with_observations(self, toy_model):
        other = toy_model.with_observations([1, 1])
        assert other.n_observations == 2
        np.testing.assert_array_equal(other.transmat, toy_model.transmat)
        assert toy_model.n_observations == 4

    def test_identity_equality_and_hash(self, toy_model):
        same_params = toy_model.with_observations(toy_model.observations)
        assert toy_model == toy_model
        assert toy_model != same_params
        assert len({toy_model, same_params}) == 2


class TestValidate:
    def test_valid_model_returns_self(self, toy_model):
        assert toy_model.validate() is toy_model

    def test_errors_are_value_errors(self):
        assert issubclass(DecodeError, ValueError)
        for cls in (EmptyInputError, InvalidProbabilityError,
                    MalformedModelError, ObservationOutOfRangeError):
            assert issubclass(cls, DecodeError)

    def test_empty_observations(self):
        with pytest.raises(EmptyInputError):
            _model(observations=[]).validate()

    def test_no_states(self):
        with pytest.raises(EmptyInputError):
            HMMModel(np.empty((0, 0)), np.empty((0, 2)), np.array([]), [0]).validate()

    def test_no_symbols(self):
        with pytest.raises(EmptyInputError):
            _model(emissionprob=np.empty((2, 0))).validate()

    def test_transition_shape_mismatch(self):
        with pytest.raises(MalformedModelError, match="Transition matrix"):
            _model(transmat=np.full((3, 3), 1.0 / 3)).validate()

    def test_emission_rows_mismatch(self):
        with pytest.raises(MalformedModelError, match="Emission matrix"):
            _model(emissionprob=np.array([[0.5, 0.5]])).validate()

    def test_startprob_not_vector(self):
        with pytest.raises(MalformedModelError):
            _model(startprob=np.array([[0.6, 0.4]])).validate()

    def test_negative_probability(self):
        with pytest.raises(InvalidProbabilityError):
            _model(transmat=np.array([[1.1, -0.1], [0.1, 0.9]])).validate()

    def test_probability_above_one(self):
        with pytest.raises(InvalidProbabilityError):
            _model(startprob=np.array([1.5, 0.4])).validate()

    def test_nan_probability(self):
        with pytest.raises(InvalidProbabilityError, match="NaN"):
            _model(emissionprob=np.array([[np.nan, 0.1], [0.2, 0.8]])).validate()

    def test_row_does_not_sum_to_one(self):
        with pytest.raises(MalformedModelError, match="row 1"):
            _model(emissionprob=np.array([[0.9, 0.1], [0.2, 0.7]])).validate()

    def test_startprob_does_not_sum_to_one(self):
        with pytest.raises(MalformedModelError, match="Initial distribution"):
            _model(startprob=np.array([0.5, 0.4])).validate()

    def test_tolerance(self):
        model = _model(startprob=np.array([0.6, 0.4001]))
        with pytest.raises(MalformedModelError):
            model.validate(tol=1e-6)
        model.validate(tol=1e-3)

    @pytest.mark.parametrize("obs", [[0, 2], [-1, 0], [0, 0, 1, 5]])
    def test_observation_out_of_range(self, obs):
        with pytest.raises(ObservationOutOfRangeError):
            _model(observations=np.array(obs)).validate()

    def test_zero_probabilities_are_valid(self, zero_emission_model):
        zero_emission_model.validate()
