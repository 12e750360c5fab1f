"""Error types raised by the ParcelHub services."""


class ParcelHubError(Exception):
    """Base exception for ParcelHub errors."""

    status_code = 500


class ValidationError(ParcelHubError):
    """Raised when a required field is missing or a value is invalid."""

    status_code = 400


class NotFoundError(ParcelHubError):
    """Raised when a referenced handover, parcel or courier does not exist."""

    status_code = 404


class ConstraintViolation(ParcelHubError):
    """Raised when the store rejects a write on a uniqueness or integrity constraint.

    A duplicate tracking number that slips past deduplication (two ingestions
    racing on the same number) surfaces as this error, so callers can treat
    it as "already exists" and retry instead of failing hard.
    """

    status_code = 409


class StorageFailure(ParcelHubError):
    """Raised when the store cannot be reached or a query fails."""

    status_code = 500
