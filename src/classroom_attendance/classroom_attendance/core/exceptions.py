class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class PermissionDenied(DomainError):
    """Raised when an actor is not authorized for the class or session."""


class NotFound(DomainError):
    """Raised when a referenced class, session or profile does not exist."""


class LocationUnavailable(DomainError):
    """Raised when geolocation is denied, unsupported or failed."""


class OutOfRange(DomainError):
    """Raised when a student is outside the session geofence."""


class PersistenceFailure(DomainError):
    """Raised when an insert/update/delete against the store failed."""


class SessionConflict(DomainError):
    """Raised when a class is already running (or was started concurrently)."""
