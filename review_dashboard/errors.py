"""Error taxonomy for the review dashboard."""


class DashboardError(Exception):
    """Base class for all dashboard errors."""


class ValidationError(DashboardError):
    """Malformed input that cannot be coerced (unknown field, bad tag value)."""


class Unauthorized(DashboardError):
    """No credential, or insufficient role, for the requested operation."""


class SessionExpired(DashboardError):
    """The remote side rejected the credential as expired."""


class TransportFailure(DashboardError):
    """Network or parse failure unrelated to authorization."""
