"""Exceptions raised by the document store."""


class DocumentStoreError(Exception):
    """Base class for document store errors."""


class StoreUnavailableError(DocumentStoreError):
    """The backing store failed or could not be reached.

    Raised for every database-level failure. Never retried by the store.
    """

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Document store unavailable during '{operation}': {reason}")


class BatchLimitExceededError(DocumentStoreError):
    """A write batch was given more operations than the store accepts."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"A write batch accepts at most {limit} operations")


class BatchCommittedError(DocumentStoreError):
    """A write batch was modified or committed after it was committed."""


class DocumentMissingError(DocumentStoreError):
    """A document that was just written could not be read back."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Document '{path}' is missing after write")
