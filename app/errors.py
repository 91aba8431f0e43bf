"""Error types surfaced to API clients.

These are the only hard failures. Everything else degrades: a failing rule
becomes a RuleFailure in the report, a failing assessment becomes an
enrichment status, a dead websocket is unsubscribed.
"""


class CheckerError(Exception):
    """Base class; `status_code` is the HTTP status the API answers with."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CheckerError):
    """Malformed or incomplete input."""

    status_code = 400


class PathNotFoundError(CheckerError):
    """A file or directory that has to exist does not."""

    status_code = 404

    def __init__(self, path: str):
        super().__init__(f"Path does not exist: {path}")
        self.path = path


class SizeExceededError(CheckerError):
    """Input larger than MAX_FILE_SIZE_MB."""

    status_code = 413

    def __init__(self, size: int, limit: int):
        super().__init__(f"File too large ({size} bytes, limit {limit} bytes)")
        self.size = size
        self.limit = limit
