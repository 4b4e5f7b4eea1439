"""Domain errors.

Every error carries a user-facing ``message`` that is safe to render next to
the form that caused it, plus the HTTP status the page is returned with.
"""


class FarmPortalError(Exception):
    """Base class for all recoverable application errors."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ----------------------------------------------------------------------------
# Auth
# ----------------------------------------------------------------------------

class ValidationError(FarmPortalError):
    """Missing or malformed form input."""


class ConflictError(FarmPortalError):
    """Registration clashes with an existing username or email."""

    status_code = 409


class DuplicateError(FarmPortalError):
    """Raised by the credential store when a unique index would be violated."""

    status_code = 409


class AuthError(FarmPortalError):
    """Bad credentials. Never says which of username/password was wrong."""

    status_code = 401


class UnauthenticatedError(FarmPortalError):
    status_code = 401


# ----------------------------------------------------------------------------
# Weather
# ----------------------------------------------------------------------------

class InputError(FarmPortalError):
    """Blank pincode."""


class NotFoundError(FarmPortalError):
    status_code = 404


class IncompleteDataError(FarmPortalError):
    status_code = 502


class TransportError(FarmPortalError):
    """The geocoding or forecast service could not be reached or answered badly."""

    status_code = 502
