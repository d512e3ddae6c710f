class DocumentError(Exception):
    """Base exception for document-related errors."""


class DocumentNotFoundError(DocumentError):
    """Raised when a document cannot be found in the database."""


class InvalidStatusTransitionError(DocumentError):
    """Raised when a status change is not on the document lifecycle graph."""


class StorageError(DocumentError):
    """Raised when a stored file cannot be read."""
