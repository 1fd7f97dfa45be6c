"""Custom exceptions for promptweave services."""


class StoreError(Exception):
    """Raised when a prompt or draft store cannot complete an operation.

    Attributes:
        path: Path to the store file involved
        message: Human-readable error message
    """

    def __init__(self, path: str, message: str = "Store operation failed"):
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class FileModifiedError(StoreError):
    """Raised when a store file is modified during an atomic write operation.

    This exception indicates that the file changed between the initial
    read and the final write, which could lead to data loss if the write
    were to proceed.
    """

    def __init__(self, path: str, message: str = "File was modified during write operation"):
        super().__init__(path, message)
