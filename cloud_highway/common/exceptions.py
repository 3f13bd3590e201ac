class InvalidArgumentError(ValueError):
    """Malformed, missing or out-of-catalog input. Surfaced as a client error."""


class StoreUnavailableError(RuntimeError):
    """The latency store could not be read or written."""


class RemoteClientError(RuntimeError):
    """A backend (DynamoDB, sqlite) operation failed."""


class NoResultError(RuntimeError):
    """A valid request produced no qualifying rows."""


class LatencyNotFoundError(NoResultError):
    pass


class UnauthorizedError(Exception):
    pass
