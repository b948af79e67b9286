"""
secret_store.py — the single HOTP key slot: secret bytes plus moving counter.

Only two operations mutate it: provision() and advance_counter(). Everything
else reads.
"""

import logging
from typing import Tuple

from .errors import CounterExhausted, SecretTooLong
from .otp_core import COUNTER_MAX, SECRET_CAPACITY

logger = logging.getLogger(__name__)


def _unseal(sealed: bytes) -> bytes:
    # Placeholder for secret-at-rest protection: a plain copy, no decryption.
    return bytes(sealed)


class SecretStore:
    """
    Holds the provisioned key and its counter.

    Known limitation: the counter is 64-bit. advance_counter() at COUNTER_MAX
    raises CounterExhausted rather than wrapping to 0, which would repeat
    moving factors under the same key.
    """

    def __init__(self, capacity: int = SECRET_CAPACITY) -> None:
        self.capacity = capacity
        self._sealed = b""
        self._counter = 0

    @property
    def length(self) -> int:
        return len(self._sealed)

    @property
    def counter(self) -> int:
        return self._counter

    def provision(self, raw_secret: bytes) -> None:
        """
        Replace the secret and reset the counter to 0.

        The previous secret and counter are discarded. An empty secret leaves
        the slot unconfigured.

        Raises:
            SecretTooLong: if raw_secret exceeds capacity; nothing changes
        """
        raw_secret = bytes(raw_secret)
        if len(raw_secret) > self.capacity:
            raise SecretTooLong(len(raw_secret), self.capacity)
        self._sealed = raw_secret
        self._counter = 0
        logger.info("Programmed %d-byte key, counter reset to 0", len(raw_secret))

    def is_configured(self) -> bool:
        return self.length > 0

    def current_secret(self) -> Tuple[bytes, int]:
        """Return (secret bytes, length). The bytes are an immutable copy."""
        secret = _unseal(self._sealed)
        return secret, len(secret)

    def is_exhausted(self) -> bool:
        return self._counter >= COUNTER_MAX

    def advance_counter(self) -> int:
        """
        Increment the counter by one and return the new value.

        Call exactly once per emitted code.

        Raises:
            CounterExhausted: at COUNTER_MAX
        """
        if self.is_exhausted():
            raise CounterExhausted("counter reached 2**64 - 1; re-provision the key")
        self._counter += 1
        return self._counter
