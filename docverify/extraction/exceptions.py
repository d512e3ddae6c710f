class FieldExtractionError(Exception):
    """Raised when structured fields cannot be extracted from recognized text."""


class FieldExtractionValidationError(FieldExtractionError):
    """Raised when an extraction payload fails domain validation."""


class FieldExtractionNetworkError(FieldExtractionError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""
