"""
hotp_core package
=================

Single-slot HOTP security key (RFC 4226) with HMAC-SHA256.

──────────────────────────────────────────────
Core algorithm
──────────────────────────────────────────────
- code = Truncate(HMAC-SHA256(key=secret, msg=counter)) mod 10^digits
- counter is an 8-byte big-endian moving factor, advanced once per emitted
  code and reset only when a new secret is programmed.
- Dynamic truncation: offset = last digest byte & 0x0F, 4 bytes from there,
  top bit cleared.

──────────────────────────────────────────────
Quick example
──────────────────────────────────────────────
>>> from hotp_core import CodeGenerator, HmacService
>>> with HmacService("sha1") as service:
...     CodeGenerator(service).generate(b"12345678901234567890", 0)
'755224'
"""

from .code_generator import CodeGenerator
from .errors import (
    CounterExhausted,
    DigitConfigInvalid,
    HashFailure,
    HotpError,
    SecretTooLong,
    Unconfigured,
)
from .hash_service import HmacService
from .secret_store import SecretStore
from .session import SessionController, TriggerEvent

__all__ = [
    "CodeGenerator",
    "CounterExhausted",
    "DigitConfigInvalid",
    "HashFailure",
    "HmacService",
    "HotpError",
    "SecretStore",
    "SecretTooLong",
    "SessionController",
    "TriggerEvent",
    "Unconfigured",
]
