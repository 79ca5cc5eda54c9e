"""
Akamai Compatibility Errors

None of these reach the client: token errors are skipped by the parser
and translation errors collapse to empty options at the public boundary.
"""


class AkamaiCompatError(Exception):
    """Base class for compatibility layer errors."""


class MalformedTokenError(AkamaiCompatError, ValueError):
    """A single legacy parameter fragment could not be parsed."""

    def __init__(self, token: str, reason: str):
        super().__init__(f"Malformed token {token!r}: {reason}")
        self.token = token
        self.reason = reason


class TranslationError(AkamaiCompatError):
    """Detection, parsing or processing failed unexpectedly."""
