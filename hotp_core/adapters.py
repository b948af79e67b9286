"""
adapters.py — what sits around the key: where presses come from and where
codes go.

Output adapters implement send(code, length) and report(message), and may
implement busy(on) to show that the key is working.
Trigger sources implement wait() -> TriggerEvent | None (None = closed).
"""

import queue
from collections import deque
from typing import Optional

from . import session

# --- Output adapters -------------------------------------------------------


class ConsoleKeyboard:
    """Prints codes as if typed on a keyboard."""

    def send(self, code: str, length: int) -> None:
        print(f"Typed \"{code[:length]}\"")

    def report(self, message: str) -> None:
        print(f"[!] {message}")


class BufferedKeyboard:
    """
    Virtual HID keyboard: keeps the last `maxlen` typed strings until drained,
    the last reported diagnostic, and whether the activity LED is lit.
    """

    def __init__(self, maxlen: int = 32) -> None:
        self._typed = deque(maxlen=maxlen)
        self.last_report: Optional[str] = None
        self.led = False
        self.led_changes = 0

    def send(self, code: str, length: int) -> None:
        self._typed.append(code[:length])

    def report(self, message: str) -> None:
        self.last_report = message

    def busy(self, on: bool) -> None:
        if on != self.led:
            self.led_changes += 1
        self.led = on

    def drain(self) -> list:
        typed = list(self._typed)
        self._typed.clear()
        return typed


# --- Trigger sources -------------------------------------------------------


class QueueTriggerSource:
    """Thread-safe event queue; close() makes wait() return None."""

    _CLOSED = object()

    def __init__(self) -> None:
        self._queue = queue.Queue()

    def push(self, event) -> None:
        self._queue.put(event)

    def close(self) -> None:
        self._queue.put(self._CLOSED)

    def wait(self, timeout: Optional[float] = None):
        """
        Block until the next event.

        Raises:
            queue.Empty: if timeout expires with nothing queued
        """
        event = self._queue.get(timeout=timeout)
        if event is self._CLOSED:
            return None
        return event


class ConsoleTriggerSource:
    """
    Reads presses from stdin:
      <Enter>      short press
      h / hold     long press
      q / EOF      quit
    """

    def __init__(self, prompt: str = "> ", input_fn=None) -> None:
        self.prompt = prompt
        self.input_fn = input_fn or input

    def wait(self):
        try:
            line = self.input_fn(self.prompt)
        except (EOFError, KeyboardInterrupt):
            return None
        line = line.strip().lower()
        if line in ("q", "quit", "exit"):
            return None
        if line in ("h", "hold"):
            return session.long_press()
        return session.short_press()
