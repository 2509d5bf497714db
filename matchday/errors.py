"""Exception types raised by matchday operations."""


class MatchdayError(Exception):
    """Base class for all matchday errors."""


class PreconditionError(MatchdayError):
    """An operation was rejected because its preconditions do not hold.

    The state passed to the operation is left untouched.
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ImportRejected(MatchdayError):
    """A backup document was malformed or incomplete."""


class StorageError(MatchdayError):
    """Reading or writing the local store failed."""

    def __init__(self, key: str, message: str):
        super().__init__(f'{key}: {message}')
        self.key = key
