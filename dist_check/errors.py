"""Error types raised by dist-check."""

from typing import Optional


class DistCheckError(Exception):
    """Base class for every dist-check error."""


class ConfigurationError(DistCheckError):
    """A configuration record or settings file could not be understood."""


class InvalidRangeError(ConfigurationError):
    """A version range expression is malformed."""

    def __init__(self, spec: str, reason: str):
        self.spec = spec
        self.reason = reason
        super().__init__(f"Invalid version range '{spec}': {reason}")


class FetchError(DistCheckError):
    """A remote document was unreachable or unusable after retries."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(message)
