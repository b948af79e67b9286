"""
code_generator.py — HOTP code derivation (RFC 4226, HMAC-SHA256 by default).

    code = Truncate(HMAC(key=secret, msg=counter as 8 bytes BE)) mod 10^digits

The generator is stateless with respect to the counter: it computes the code
for the value it is given and never advances anything.
"""

import logging

from . import otp_core

logger = logging.getLogger(__name__)


class CodeGenerator:
    def __init__(self, hash_service, digits: int = otp_core.DEFAULT_DIGITS) -> None:
        """
        :param hash_service: object with compute(key, message) -> digest bytes
        :param digits: code length, validated to [1, 9]
        :raises DigitConfigInvalid: on a bad digit count
        """
        self.digits = otp_core.validate_digits(digits)
        self.hash_service = hash_service

    def generate(self, secret: bytes, counter: int) -> str:
        """
        Generate the code for one counter value.

        Steps:
        1. moving factor = 8-byte big-endian counter
        2. digest = HMAC(secret, moving factor) via the hash service
        3. dynamic truncation -> 31-bit integer
        4. mod 10^digits, zero-padded

        Raises:
            HashFailure: hash service error, timeout or short digest
            ValueError: counter outside the unsigned 64-bit range
        """
        moving_factor = otp_core.int_to_bytes(counter)
        digest = self.hash_service.compute(secret, moving_factor)
        dbc = otp_core.dynamic_truncate(digest)
        code = otp_core.format_code(dbc, self.digits)
        logger.debug("HOTP counter=%d -> dbc=%d", counter, dbc)
        return code
