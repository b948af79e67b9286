#!/usr/bin/env python3
"""
otp_core.py — pure helpers for the HOTP key (RFC 4226).

Goals:
- Hold the stateless pieces of the algorithm so the code generator, the CLI and
  the HTTP panel all share one implementation.
- No I/O and no counter state here. The counter lives in SecretStore only.

Security notes:
- The default hash is HMAC-SHA256, not the RFC's SHA-1. Authenticators checking
  these codes must be set to "sha256".
- Nothing here ever logs secret bytes.
"""

import base64
import binascii
import hashlib
import struct
from typing import Optional

import pyotp

from .errors import DigitConfigInvalid, HashFailure

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # digits per code
MIN_DIGITS = 1
MAX_DIGITS = 9              # 10**9 still fits the 31-bit truncated value's modulus domain
SECRET_CAPACITY = 64        # bytes in the single key slot
COUNTER_BYTES = 8           # moving factor width (64-bit counter)
COUNTER_MAX = 2 ** 64 - 1
TRUNCATE_BYTES = 4
DEFAULT_ALGORITHM = "sha256"
DEFAULT_SECRET = "test"     # convenience seed programmed at startup (base32)
DEFAULT_HASH_TIMEOUT = 2.0  # seconds

ALGORITHMS = {
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
    "sha512": hashlib.sha512,
}


# --- Validation ------------------------------------------------------------
def validate_digits(digits) -> int:
    """
    Check a digit count and return it as int.

    Raises:
        DigitConfigInvalid: if digits is not an integer in [1, 9]
    """
    if isinstance(digits, bool) or not isinstance(digits, int):
        raise DigitConfigInvalid(digits)
    if digits < MIN_DIGITS or digits > MAX_DIGITS:
        raise DigitConfigInvalid(digits)
    return digits


def resolve_algorithm(name: str):
    """Map "sha1" / "sha256" / "sha512" (any case) to the hashlib constructor."""
    try:
        return ALGORITHMS[name.lower()]
    except (KeyError, AttributeError) as e:
        raise ValueError(
            f"Invalid algorithm {name!r}, must be one of {', '.join(sorted(ALGORITHMS))}"
        ) from e


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """
    Encode the counter as the 8-byte big-endian moving factor.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'

    Raises:
        ValueError: if i does not fit an unsigned 64-bit integer
    """
    if i < 0 or i > COUNTER_MAX:
        raise ValueError(f"counter {i} outside [0, 2**64 - 1]")
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    Apply RFC 4226 dynamic truncation.

    - offset = last byte & 0x0F (0..15)
    - read 4 bytes from offset as big-endian, clear the top bit
    - returns a 31-bit non-negative integer

    Raises:
        HashFailure: if the digest is too short for the selected window
    """
    if not hmac_digest:
        raise HashFailure("empty digest")
    offset = hmac_digest[-1] & 0x0F
    end = offset + TRUNCATE_BYTES
    if end > len(hmac_digest):
        raise HashFailure(
            f"digest of {len(hmac_digest)} bytes too short for offset {offset}"
        )
    (value,) = struct.unpack(">I", hmac_digest[offset:end])
    return value & 0x7FFFFFFF


def format_code(value: int, digits: int = DEFAULT_DIGITS) -> str:
    """Reduce modulo 10^digits and zero-pad to exactly `digits` characters."""
    return str(value % (10 ** digits)).zfill(digits)


# --- Secret encoding -------------------------------------------------------
def decode_base32_secret(secret_b32: str) -> bytes:
    """
    Decode a human-entered Base32 secret to raw key bytes.

    Accepts lowercase, embedded spaces and missing '=' padding.

    Raises:
        ValueError: if the secret is not valid Base32
    """
    normalized = secret_b32.strip().replace(" ", "").upper()
    normalized += "=" * ((-len(normalized)) % 8)
    try:
        return base64.b32decode(normalized, casefold=True)
    except binascii.Error as e:
        raise ValueError("Invalid Base32 secret") from e


def encode_base32_secret(secret: bytes) -> str:
    """Raw key bytes to unpadded upper-case Base32, as authenticator apps expect."""
    return base64.b32encode(secret).decode("ascii").rstrip("=")


def generate_base32_secret() -> str:
    """Random 160-bit secret in Base32 (32 characters)."""
    return pyotp.random_base32()


def format_otpauth_uri(
    secret: bytes,
    counter: int = 0,
    account: str = "security-key",
    issuer: Optional[str] = "hotp-key",
    digits: int = DEFAULT_DIGITS,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    Build an otpauth://hotp URI for enrolling the current secret and counter
    in an authenticator or verifier.

    Arguments:
        secret: raw key bytes
        counter: counter value the verifier should expect next
        account: account label
        issuer: issuer label (None to omit)
        digits: code length
        algorithm: "sha1", "sha256" or "sha512"
    """
    hotp = pyotp.HOTP(
        encode_base32_secret(secret),
        digits=digits,
        digest=resolve_algorithm(algorithm),
        name=account,
        issuer=issuer,
        initial_count=counter,
    )
    return hotp.provisioning_uri()
