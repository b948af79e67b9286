import pytest

from hotp_core.config import load_config
from hotp_core.errors import DigitConfigInvalid


def test_defaults():
    assert load_config() == {
        "digits": 6,
        "algorithm": "sha256",
        "hash_timeout": 2.0,
        "default_secret": "test",
        "auto_provision": True,
    }


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("HOTP_DIGITS", "8")
    monkeypatch.setenv("HOTP_ALGORITHM", "SHA512")
    monkeypatch.setenv("HOTP_HASH_TIMEOUT", "0.5")
    monkeypatch.setenv("HOTP_DEFAULT_SECRET", "JBSWY3DPEHPK3PXP")
    monkeypatch.setenv("HOTP_AUTO_PROVISION", "no")
    cfg = load_config()
    assert cfg["digits"] == 8
    assert cfg["algorithm"] == "sha512"
    assert cfg["hash_timeout"] == 0.5
    assert cfg["default_secret"] == "JBSWY3DPEHPK3PXP"
    assert cfg["auto_provision"] is False


def test_explicit_overrides_win(monkeypatch):
    monkeypatch.setenv("HOTP_DIGITS", "8")
    cfg = load_config({"digits": 7, "algorithm": None})
    assert cfg["digits"] == 7
    assert cfg["algorithm"] == "sha256"


@pytest.mark.parametrize("raw", ["0", "10", "six"])
def test_bad_digits_from_environment(monkeypatch, raw):
    monkeypatch.setenv("HOTP_DIGITS", raw)
    with pytest.raises(DigitConfigInvalid):
        load_config()


def test_bad_algorithm():
    with pytest.raises(ValueError):
        load_config({"algorithm": "md5"})


def test_bad_timeout(monkeypatch):
    with pytest.raises(ValueError):
        load_config({"hash_timeout": 0})
    monkeypatch.setenv("HOTP_HASH_TIMEOUT", "soon")
    with pytest.raises(ValueError):
        load_config()


def test_unknown_key():
    with pytest.raises(ValueError):
        load_config({"slots": 2})


@pytest.mark.parametrize("raw", ["nan", "inf", "-inf"])
def test_timeout_must_be_finite(monkeypatch, raw):
    monkeypatch.setenv("HOTP_HASH_TIMEOUT", raw)
    with pytest.raises(ValueError):
        load_config()


def test_infinite_timeout_override_rejected():
    with pytest.raises(ValueError):
        load_config({"hash_timeout": float("inf")})
