"""Domain errors and failure typing."""


class GeoEngineError(Exception):
    """Base class for geo engine failures."""

    error_code = "GEO_ENGINE_ERROR"


class ConfigError(GeoEngineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class ContractError(GeoEngineError):
    """Raised when a caller passes input outside a declared domain."""

    error_code = "CONTRACT_ERROR"


class NegativeDistanceError(ContractError):
    """Raised when a fee is requested for a negative or non-finite distance."""

    error_code = "NEGATIVE_DISTANCE"


class InvalidCoordinateError(ContractError):
    """Raised when latitude or longitude fall outside their valid ranges."""

    error_code = "INVALID_COORDINATE"


class InvalidFeatureError(GeoEngineError):
    """Raised when a geocoder feature carries no usable coordinate pair.

    Not retryable: the caller has to ask for a different address.
    """

    error_code = "INVALID_FEATURE"


class GeocodingError(GeoEngineError):
    """Raised for geocoding provider failures."""

    error_code = "GEOCODING_ERROR"
