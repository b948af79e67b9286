import hashlib
import hmac
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hotp_core.adapters import BufferedKeyboard  # noqa: E402
from hotp_core.code_generator import CodeGenerator  # noqa: E402
from hotp_core.config import ENV_KEYS  # noqa: E402
from hotp_core.errors import HashFailure  # noqa: E402
from hotp_core.secret_store import SecretStore  # noqa: E402
from hotp_core.session import SessionController  # noqa: E402


class RecordingHashService:
    """HMAC-SHA256 that records every message and can be told to fail."""

    def __init__(self, failures: int = 0):
        self.failures = failures
        self.messages = []

    @property
    def calls(self) -> int:
        return len(self.messages)

    def compute(self, key: bytes, message: bytes) -> bytes:
        self.messages.append(message)
        if self.failures:
            self.failures -= 1
            raise HashFailure("injected failure")
        return hmac.new(key, message, hashlib.sha256).digest()

    def close(self):
        pass


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS.values():
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def hash_service():
    return RecordingHashService()


@pytest.fixture()
def keyboard():
    return BufferedKeyboard()


@pytest.fixture()
def store():
    return SecretStore()


@pytest.fixture()
def controller(store, hash_service, keyboard):
    ctrl = SessionController(store, CodeGenerator(hash_service), keyboard)
    ctrl.start()
    return ctrl
