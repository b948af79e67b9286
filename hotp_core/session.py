"""
session.py — the button-driven state machine of the HOTP key.

    idle --start()--> awaiting_trigger
    awaiting_trigger --short press, configured--> generating --> awaiting_trigger
    awaiting_trigger --short press, unconfigured--> reporting_error --> awaiting_trigger

The controller is the only code that mutates the SecretStore. Events are
handled one at a time; handle() is not reentrant.

Long presses are accepted as events but ignored: re-provisioning from the key
itself is not supported.
"""

import logging
import threading
from typing import Any, Optional, Tuple

from . import otp_core
from .errors import CounterExhausted, HashFailure, HotpError, Unconfigured

logger = logging.getLogger(__name__)

# --- States ----------------------------------------------------------------
IDLE = "idle"
AWAITING_TRIGGER = "awaiting_trigger"
GENERATING = "generating"
REPORTING_ERROR = "reporting_error"

# --- Event kinds -----------------------------------------------------------
SHORT_PRESS = "short_press"
LONG_PRESS = "long_press"
PROVISION = "provision"
STATUS = "status"
OTPAUTH_URI = "otpauth_uri"

USAGE = (
    "HOTP key started. Usage:\n"
    "* Press the button to get the next HOTP code.\n"
    "* Holding the button does nothing yet: re-provisioning from the key is not supported.\n"
)


class TriggerEvent:
    """
    One input to the controller.

    `secret` carries decoded bytes for PROVISION, `params` carries labels for
    OTPAUTH_URI. `reply` is an optional concurrent.futures.Future completed
    with handle()'s result when the event is processed by run().

    A caller that stops waiting calls abandon(); the controller calls
    commit() right before emitting a code. Exactly one of the two wins.
    """

    def __init__(self, kind: str, secret: Optional[bytes] = None, params: Optional[dict] = None, reply=None):
        self.kind = kind
        self.secret = secret
        self.params = params or {}
        self.reply = reply
        self._lock = threading.Lock()
        self._abandoned = False
        self._committed = False

    def abandon(self) -> bool:
        """Withdraw the event. False if a code was already committed for it."""
        with self._lock:
            if self._committed:
                return False
            self._abandoned = True
            return True

    def commit(self) -> bool:
        """Claim the event for emission. False if the caller abandoned it."""
        with self._lock:
            if self._abandoned:
                return False
            self._committed = True
            return True

    def __repr__(self) -> str:
        # never include the secret
        return f"TriggerEvent({self.kind!r})"


def short_press(reply=None) -> TriggerEvent:
    return TriggerEvent(SHORT_PRESS, reply=reply)


def long_press(reply=None) -> TriggerEvent:
    return TriggerEvent(LONG_PRESS, reply=reply)


def provision(secret: bytes, reply=None) -> TriggerEvent:
    return TriggerEvent(PROVISION, secret=secret, reply=reply)


class SessionController:
    def __init__(self, store, generator, output, algorithm: str = otp_core.DEFAULT_ALGORITHM) -> None:
        self.store = store
        self.generator = generator
        self.output = output
        self.algorithm = algorithm
        self.state = IDLE

    @property
    def digits(self) -> int:
        return self.generator.digits

    # --- Lifecycle ---------------------------------------------------------
    def start(self, default_secret: Optional[str] = None) -> None:
        """
        Leave idle. If `default_secret` (Base32) is given, program it first as a
        convenience seed; a bad seed leaves the key unconfigured.
        """
        if self.state != IDLE:
            raise RuntimeError(f"controller already started (state={self.state})")
        if default_secret:
            try:
                self.store.provision(otp_core.decode_base32_secret(default_secret))
                logger.info("Programmed default secret as key")
            except (ValueError, HotpError) as e:
                logger.error("Cannot program default secret: %s", e)
        self.state = AWAITING_TRIGGER

    def run(self, source) -> None:
        """
        Main loop: block on the trigger source, handle each event, repeat.

        Returns when source.wait() yields None (source closed). Events whose
        reply was cancelled while queued are dropped unhandled. An unexpected
        error in one event is handed to its reply and the loop keeps going.
        """
        if self.state == IDLE:
            self.start()
        while True:
            event = source.wait()
            if event is None:
                logger.info("Trigger source closed, stopping")
                return
            if event.reply is not None and not event.reply.set_running_or_notify_cancel():
                logger.info("Dropped %r: caller gave up waiting", event)
                continue
            try:
                result = self.handle(event)
            except Exception as e:
                logger.exception("ERROR handling %r", event)
                self.state = AWAITING_TRIGGER
                if event.reply is not None:
                    event.reply.set_exception(e)
                continue
            if event.reply is not None:
                event.reply.set_result(result)

    # --- Event handling ----------------------------------------------------
    def handle(self, event: TriggerEvent) -> Tuple[bool, Any]:
        """
        Process one event and return (ok, value).

        ok=True: value is the typed code, None, a status dict or a URI.
        ok=False: value is the HotpError that was reported (None for an
        ignored long press).
        """
        if self.state == IDLE:
            raise RuntimeError("controller not started")
        if self.state == GENERATING:
            raise RuntimeError("controller is not reentrant while generating")

        if event.kind == SHORT_PRESS:
            return self._on_short_press(event)
        if event.kind == LONG_PRESS:
            logger.info("Long press ignored: re-provisioning from the key is not supported")
            return False, None
        if event.kind == PROVISION:
            return self._on_provision(event.secret)
        if event.kind == STATUS:
            return True, self.status()
        if event.kind == OTPAUTH_URI:
            return self._on_otpauth_uri(event.params)
        raise ValueError(f"Unknown event kind {event.kind!r}")

    def _on_short_press(self, event: TriggerEvent) -> Tuple[bool, Any]:
        if not self.store.is_configured():
            return self._report(Unconfigured())
        if self.store.is_exhausted():
            return self._report(CounterExhausted("counter exhausted; re-provision the key"))

        self.state = GENERATING
        self._busy(True)
        try:
            secret, _ = self.store.current_secret()
            counter = self.store.counter
            try:
                code = self.generator.generate(secret, counter)
            except HashFailure as e:
                return self._report(e)

            if not event.commit():
                logger.info("Discarded code for counter %d: caller gave up waiting", counter)
                return False, None

            try:
                self.output.send(code, len(code))
            except Exception as e:
                # the code may already be visible; never hand out this counter again
                logger.error("ERROR sending code to output: %s", e)
            self.store.advance_counter()
            logger.info("Counter: %d. Emitted %d-digit code", counter, len(code))
            return True, code
        finally:
            self._busy(False)
            self.state = AWAITING_TRIGGER

    def _on_provision(self, secret: Optional[bytes]) -> Tuple[bool, Any]:
        self._busy(True)
        try:
            self.store.provision(secret or b"")
        except HotpError as e:
            return self._report(e)
        finally:
            self._busy(False)
        return True, None

    def _on_otpauth_uri(self, params: dict) -> Tuple[bool, Any]:
        if not self.store.is_configured():
            return self._report(Unconfigured())
        secret, _ = self.store.current_secret()
        uri = otp_core.format_otpauth_uri(
            secret,
            counter=self.store.counter,
            account=params.get("account", "security-key"),
            issuer=params.get("issuer", "hotp-key"),
            digits=self.digits,
            algorithm=self.algorithm,
        )
        return True, uri

    def _busy(self, on: bool) -> None:
        # busy() is optional on output adapters (the key's activity LED)
        indicator = getattr(self.output, "busy", None)
        if indicator is None:
            return
        try:
            indicator(on)
        except Exception as e:
            logger.error("ERROR switching busy indicator: %s", e)

    def _report(self, error: HotpError) -> Tuple[bool, Any]:
        self.state = REPORTING_ERROR
        logger.warning("%s: %s", type(error).__name__, error)
        try:
            self.output.report(str(error))
        except Exception as e:
            logger.error("ERROR reporting to output: %s", e)
        self.state = AWAITING_TRIGGER
        return False, error

    def status(self) -> dict:
        return {
            "state": self.state,
            "configured": self.store.is_configured(),
            "counter": self.store.counter,
            "secret_length": self.store.length,
            "digits": self.digits,
            "algorithm": self.algorithm,
        }
