from __future__ import annotations


class RebridgeError(Exception):
    """Base class for every error raised by rebridge."""


class StoreUnavailable(RebridgeError):
    """The underlying hash store failed a get or set."""


class Corrupt(RebridgeError):
    """A stored root document is not valid JSON."""

    def __init__(self, root: str, reason: str):
        super().__init__(f"Stored value for {root!r} is not valid JSON: {reason}")
        self.root = root


class UnsupportedOperation(RebridgeError):
    pass


class InvalidUsage(RebridgeError, TypeError):
    pass


class TypeMismatch(RebridgeError, TypeError):
    pass


class EmptySequence(RebridgeError, IndexError):
    pass


class WriteConflict(RebridgeError):
    """Optimistic writes kept losing against concurrent writers."""

    def __init__(self, root: str, attempts: int):
        super().__init__(f"Gave up writing {root!r} after {attempts} conflicting attempts")
        self.root = root
        self.attempts = attempts
