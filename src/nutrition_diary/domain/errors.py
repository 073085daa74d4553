"""Domain error types."""


class OracleUnavailableError(RuntimeError):
    """Nutrition oracle cannot be reached or has no credentials."""


class OracleResponseError(RuntimeError):
    """Nutrition oracle answered with unusable data."""


class StoreIOError(RuntimeError):
    """Persistent store read or write failed."""
