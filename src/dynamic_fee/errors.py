"""
Exceptions raised by the dynamic fee engine.

Uncalibrated pools are not errors: missing depth or prices produce zero
signals and therefore no fee override.
"""


class DynamicFeeError(Exception):
    """Base class for all dynamic fee engine errors."""
    pass


class UnauthorizedCallerError(DynamicFeeError):
    """Raised when a call does not come from the trusted dispatcher or keeper."""

    def __init__(self, caller: str, expected: str):
        self.caller = caller
        self.expected = expected
        super().__init__(f"Unauthorized caller {caller} (expected {expected})")


class OutOfRangeError(DynamicFeeError):
    """Raised when a tick or sqrt price lies outside the representable range."""
    pass


class ConfigError(DynamicFeeError):
    """Exception raised for configuration-related errors."""
    pass
