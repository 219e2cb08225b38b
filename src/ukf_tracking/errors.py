"""
Exception hierarchy for the unscented tracking filter.

All errors raised by the filter on behalf of the caller derive from
``UKFError`` so a consumer can decide, in one place, whether a bad sample
should abort processing or be skipped. Argument validation (wrong vector
length, non-finite values, invalid configuration) keeps raising plain
``ValueError`` like the rest of the package.
"""


class UKFError(RuntimeError):
    """Base exception for filter errors."""


class UnknownSensorError(UKFError, ValueError):
    """Raised when a measurement carries a sensor tag the filter does not handle."""


class InitializationError(UKFError):
    """Raised when the first measurement cannot be used to initialize the filter."""


class FilterNotInitializedError(UKFError):
    """Raised when prediction or update is requested before initialization."""


class PredictionRequiredError(UKFError):
    """Raised when an update is requested without a prediction since the last update."""


class NumericalError(UKFError):
    """Base class for numerical failures that indicate upstream state corruption."""


class CovarianceNotPositiveDefiniteError(NumericalError):
    """Raised when the augmented covariance has no Cholesky factorization."""


class SingularInnovationCovarianceError(NumericalError):
    """Raised when the innovation covariance S cannot be inverted."""


class MeasurementParseError(ValueError):
    """
    Raised when a measurement record cannot be parsed.

    Attributes:
        line_number: 1-based line number of the offending record, if known
    """

    def __init__(self, message: str, line_number: int = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number
