"""
hash_service.py — the keyed-hash engine the code generator talks to.

The digest runs on a single worker thread, like a hardware HMAC block that
signals completion later. compute() waits for it with a bounded timeout so a
stuck engine turns into HashFailure instead of a hung key.
"""

import hmac
import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout

from .errors import HashFailure
from .otp_core import DEFAULT_ALGORITHM, DEFAULT_HASH_TIMEOUT, resolve_algorithm

logger = logging.getLogger(__name__)


class HmacService:
    """HMAC engine with one worker and a completion timeout."""

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM, timeout: float = DEFAULT_HASH_TIMEOUT) -> None:
        self.algorithm = algorithm.lower()
        self.digest = resolve_algorithm(algorithm)
        self.digest_size = self.digest().digest_size
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="hmac")

    def _run(self, key: bytes, message: bytes) -> bytes:
        return hmac.new(key, message, self.digest).digest()

    def compute(self, key: bytes, message: bytes) -> bytes:
        """
        HMAC(key, message) with the configured algorithm.

        Raises:
            HashFailure: on timeout, engine error or a digest of the wrong size
        """
        try:
            future = self._executor.submit(self._run, key, message)
        except RuntimeError as e:
            raise HashFailure("HMAC engine is shut down") from e

        try:
            digest = future.result(timeout=self.timeout)
        except FutureTimeout as e:
            future.cancel()
            raise HashFailure(f"HMAC did not complete within {self.timeout}s") from e
        except Exception as e:
            raise HashFailure(f"HMAC failure: {e}") from e

        if len(digest) != self.digest_size:
            raise HashFailure(
                f"HMAC returned {len(digest)} bytes, expected {self.digest_size}"
            )
        logger.debug("HMAC-%s done over %d-byte message", self.algorithm.upper(), len(message))
        return digest

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
