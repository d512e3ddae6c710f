class ExternalVerificationError(Exception):
    """Raised when the external identity registry cannot answer a request."""
