"""Errors raised while validating or decoding an HMM."""


class DecodeError(ValueError):
    """Base class for all decoding failures."""


class MalformedModelError(DecodeError):
    """Dimensions disagree, or a distribution does not sum to 1."""


class InvalidProbabilityError(DecodeError):
    """A probability is NaN, negative, or greater than 1."""


class ObservationOutOfRangeError(DecodeError):
    """An observation symbol lies outside [0, n_symbols)."""


class EmptyInputError(DecodeError):
    """No states, no symbols, or no observations."""


class DecodeCancelled(DecodeError):
    """Decoding was stopped through its cancel event."""
