class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is missing or malformed."""


class ConflictError(DomainError):
    """Raised when a natural key (worker identity, allowed phone) already exists."""


class NotFoundError(DomainError):
    """Raised when an admin operation targets a row that does not exist."""


class DistanceError(DomainError):
    """Raised when two descriptors cannot be compared."""


class ShapeMismatch(DistanceError):
    """Descriptor is not a flat numeric sequence, or lengths differ."""


class PersistenceError(Exception):
    """The store failed; the current request cannot be completed."""


class NotificationDeliveryError(Exception):
    """A single outbound delivery failed. Never propagated past the notifier."""
