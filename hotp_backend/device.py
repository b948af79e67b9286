"""
device.py — runs one HOTP key behind a queue so HTTP handlers never touch it.

Flask serves requests on many threads; the key must see one event at a time.
Every request becomes a TriggerEvent pushed on the queue, a single worker
thread runs SessionController.run() over that queue, and the request waits on
the event's reply future.
"""

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Optional, Tuple

from hotp_core import session
from hotp_core.adapters import BufferedKeyboard, QueueTriggerSource
from hotp_core.code_generator import CodeGenerator
from hotp_core.config import load_config
from hotp_core.hash_service import HmacService
from hotp_core.secret_store import SecretStore

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 5.0  # seconds a request waits for the key


class KeyDevice:
    def __init__(self, cfg: Optional[dict] = None, output=None, hash_service=None,
                 request_timeout: float = DEFAULT_REQUEST_TIMEOUT) -> None:
        self.cfg = cfg or load_config()
        self.request_timeout = request_timeout
        self.store = SecretStore()
        self.hash_service = hash_service or HmacService(self.cfg["algorithm"], self.cfg["hash_timeout"])
        self.output = output or BufferedKeyboard()
        self.controller = session.SessionController(
            self.store,
            CodeGenerator(self.hash_service, self.cfg["digits"]),
            self.output,
            algorithm=self.cfg["algorithm"],
        )
        self.source = QueueTriggerSource()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("device already started")
        seed = self.cfg["default_secret"] if self.cfg["auto_provision"] else None
        self.controller.start(seed)
        self._thread = threading.Thread(target=self._run, name="hotp-key", daemon=True)
        self._thread.start()
        logger.info("HOTP key started (digits=%d, algorithm=%s)", self.cfg["digits"], self.cfg["algorithm"])

    def _run(self) -> None:
        try:
            self.controller.run(self.source)
        except Exception:
            logger.exception("Session controller stopped on an unexpected error")

    def submit(self, event: session.TriggerEvent) -> Tuple[bool, Any]:
        """
        Queue an event and wait for the controller's (ok, value) result.

        On timeout a queued event is cancelled and a running one abandoned, so
        no code is emitted or counted for a caller that already got an error.
        If the controller committed a code just before the timeout, wait for
        it instead.

        Raises:
            concurrent.futures.TimeoutError: if the key does not answer in time
        """
        event.reply = Future()
        self.source.push(event)
        try:
            return event.reply.result(timeout=self.request_timeout)
        except FutureTimeout:
            if event.reply.cancel() or event.abandon():
                logger.warning("Gave up on %r after %.1fs", event, self.request_timeout)
                raise
        return event.reply.result(timeout=self.request_timeout)

    # --- Convenience wrappers ---------------------------------------------
    def press(self, long: bool = False) -> Tuple[bool, Any]:
        return self.submit(session.long_press() if long else session.short_press())

    def provision(self, secret: bytes) -> Tuple[bool, Any]:
        return self.submit(session.provision(secret))

    def status(self) -> dict:
        _, snapshot = self.submit(session.TriggerEvent(session.STATUS))
        return snapshot

    def otpauth_uri(self, account: str, issuer: str) -> Tuple[bool, Any]:
        params = {"account": account, "issuer": issuer}
        return self.submit(session.TriggerEvent(session.OTPAUTH_URI, params=params))

    def stop(self, timeout: float = 2.0) -> None:
        self.source.close()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        self.hash_service.close()
