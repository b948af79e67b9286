import pytest

from hotp_core.errors import CounterExhausted, SecretTooLong
from hotp_core.otp_core import COUNTER_MAX
from hotp_core.secret_store import SecretStore


def test_starts_unconfigured():
    store = SecretStore()
    assert not store.is_configured()
    assert store.counter == 0
    assert store.current_secret() == (b"", 0)


def test_provision_full_capacity(store):
    secret = bytes(range(64))
    store.provision(secret)
    assert store.is_configured()
    assert store.current_secret() == (secret, 64)
    assert store.counter == 0


def test_provision_over_capacity_keeps_previous_state(store):
    store.provision(b"original")
    store.advance_counter()
    store.advance_counter()

    with pytest.raises(SecretTooLong) as excinfo:
        store.provision(bytes(65))

    assert excinfo.value.length == 65
    assert store.current_secret() == (b"original", 8)
    assert store.counter == 2


def test_reprovision_resets_counter(store):
    store.provision(b"first")
    for _ in range(3):
        store.advance_counter()
    store.provision(b"second")
    assert store.counter == 0
    assert store.current_secret() == (b"second", 6)


def test_empty_secret_leaves_store_unconfigured(store):
    store.provision(b"abc")
    store.provision(b"")
    assert not store.is_configured()


def test_current_secret_is_a_copy(store):
    raw = bytearray(b"mutable")
    store.provision(raw)
    raw[0] = 0
    secret, _ = store.current_secret()
    assert secret == b"mutable"
    assert isinstance(secret, bytes)


def test_advance_counter_returns_new_value(store):
    store.provision(b"k")
    assert store.advance_counter() == 1
    assert store.advance_counter() == 2
    assert store.counter == 2


def test_counter_does_not_wrap(store):
    store.provision(b"k")
    store._counter = COUNTER_MAX
    assert store.is_exhausted()
    with pytest.raises(CounterExhausted):
        store.advance_counter()
    assert store.counter == COUNTER_MAX
