import base64
import hashlib

import pyotp
import pytest

from hotp_core.code_generator import CodeGenerator
from hotp_core.errors import DigitConfigInvalid, HashFailure
from hotp_core.hash_service import HmacService
from hotp_core.otp_core import decode_base32_secret

RFC4226_SECRET = b"12345678901234567890"
RFC4226_CODES = [
    "755224", "287082", "359152", "969429", "338314",
    "254676", "287922", "162583", "399871", "520489",
]

RFC6238_SHA256_SECRET = b"12345678901234567890123456789012"
# (unix time, 8-digit code) from RFC 6238 appendix B; counter = time // 30
RFC6238_SHA256_CODES = [
    (59, "46119246"),
    (1111111109, "68084774"),
    (1111111111, "67062674"),
    (1234567890, "91819424"),
    (2000000000, "90698825"),
    (20000000000, "77737706"),
]


@pytest.fixture()
def sha256_service():
    with HmacService("sha256") as service:
        yield service


def test_rfc4226_sha1_vectors():
    with HmacService("sha1") as service:
        generator = CodeGenerator(service)
        codes = [generator.generate(RFC4226_SECRET, counter) for counter in range(10)]
    assert codes == RFC4226_CODES


@pytest.mark.parametrize("timestamp,expected", RFC6238_SHA256_CODES)
def test_rfc6238_sha256_vectors(sha256_service, timestamp, expected):
    generator = CodeGenerator(sha256_service, digits=8)
    assert generator.generate(RFC6238_SHA256_SECRET, timestamp // 30) == expected


def test_ascii_test_secret_matches_reference(sha256_service):
    reference = pyotp.HOTP(base64.b32encode(b"test").decode(), digest=hashlib.sha256)
    code = CodeGenerator(sha256_service).generate(b"test", 0)
    assert code == reference.at(0)
    assert len(code) == 6 and code.isdigit()


def test_default_seed_matches_reference(sha256_service):
    reference = pyotp.HOTP("test", digest=hashlib.sha256)
    generator = CodeGenerator(sha256_service)
    secret = decode_base32_secret("test")
    for counter in range(5):
        assert generator.generate(secret, counter) == reference.at(counter)


def test_generate_is_deterministic(hash_service):
    generator = CodeGenerator(hash_service)
    first = generator.generate(b"test", 12)
    assert all(generator.generate(b"test", 12) == first for _ in range(5))


def test_moving_factor_sent_to_hash_service(hash_service):
    CodeGenerator(hash_service).generate(b"key", 0x0102)
    assert hash_service.messages == [b"\x00\x00\x00\x00\x00\x00\x01\x02"]


@pytest.mark.parametrize("digits", [1, 9])
def test_digit_bounds(sha256_service, digits):
    code = CodeGenerator(sha256_service, digits=digits).generate(b"test", 3)
    assert len(code) == digits and code.isdigit()


@pytest.mark.parametrize("digits", [0, 10])
def test_invalid_digits_rejected_at_construction(sha256_service, digits):
    with pytest.raises(DigitConfigInvalid):
        CodeGenerator(sha256_service, digits=digits)


def test_hash_failure_propagates(hash_service):
    hash_service.failures = 1
    with pytest.raises(HashFailure):
        CodeGenerator(hash_service).generate(b"test", 0)


def test_negative_counter_rejected(hash_service):
    with pytest.raises(ValueError):
        CodeGenerator(hash_service).generate(b"test", -1)
    assert hash_service.calls == 0
