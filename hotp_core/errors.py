"""
errors.py — error taxonomy of the HOTP key.

Every error except DigitConfigInvalid is recoverable: the session controller
reports it and goes back to waiting for the next button press.
"""


class HotpError(Exception):
    """Base class for all HOTP key errors."""


class SecretTooLong(HotpError):
    """Provisioning rejected; the previous secret and counter are unchanged."""

    def __init__(self, length: int, capacity: int):
        super().__init__(f"secret is {length} bytes, capacity is {capacity}")
        self.length = length
        self.capacity = capacity


class Unconfigured(HotpError):
    """A code was requested before any secret was provisioned."""

    def __init__(self, message: str = "HOTP key not yet configured"):
        super().__init__(message)


class HashFailure(HotpError):
    """The keyed-hash service failed or timed out. The counter must not move."""


class DigitConfigInvalid(HotpError):
    """Digit count outside [1, 9]. Fatal at configuration time."""

    def __init__(self, digits):
        super().__init__(f"digits must be between 1 and 9, got {digits!r}")
        self.digits = digits


class CounterExhausted(HotpError):
    """The 64-bit counter reached its maximum; the key must be re-provisioned."""
