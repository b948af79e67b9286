"""
config.py — configuration for the HOTP key.

Values come from, in increasing priority:
1. defaults in otp_core
2. environment variables (HOTP_DIGITS, HOTP_ALGORITHM, HOTP_HASH_TIMEOUT,
   HOTP_DEFAULT_SECRET, HOTP_AUTO_PROVISION)
3. explicit overrides (CLI flags, app factory arguments); None means "not given"

The result is a plain dict, validated before it is returned so a bad digit
count stops startup instead of surfacing on the first button press.
"""

import math
import os
from typing import Any, Dict, Optional

from . import otp_core

_BOOL_TRUE = {"1", "true", "yes", "on"}

DEFAULTS: Dict[str, Any] = {
    "digits": otp_core.DEFAULT_DIGITS,
    "algorithm": otp_core.DEFAULT_ALGORITHM,
    "hash_timeout": otp_core.DEFAULT_HASH_TIMEOUT,
    "default_secret": otp_core.DEFAULT_SECRET,
    "auto_provision": True,
}

ENV_KEYS = {
    "digits": "HOTP_DIGITS",
    "algorithm": "HOTP_ALGORITHM",
    "hash_timeout": "HOTP_HASH_TIMEOUT",
    "default_secret": "HOTP_DEFAULT_SECRET",
    "auto_provision": "HOTP_AUTO_PROVISION",
}


def _coerce_env_value(key: str, default):
    raw = os.environ.get(key)
    if raw is None:
        return default
    if isinstance(default, bool):
        return raw.strip().lower() in _BOOL_TRUE
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            # leave it as text so validate_digits rejects it loudly
            return raw
    if isinstance(default, float):
        try:
            return float(raw)
        except ValueError as e:
            raise ValueError(f"{key} must be a number, got {raw!r}") from e
    return raw


def load_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build and validate the key configuration.

    Raises:
        DigitConfigInvalid: digits outside [1, 9]
        ValueError: unknown algorithm, or a hash timeout that is not a
            positive finite number
    """
    cfg = {name: _coerce_env_value(ENV_KEYS[name], default) for name, default in DEFAULTS.items()}
    for name, value in (overrides or {}).items():
        if name not in DEFAULTS:
            raise ValueError(f"Unknown configuration key {name!r}")
        if value is not None:
            cfg[name] = value

    cfg["digits"] = otp_core.validate_digits(cfg["digits"])
    otp_core.resolve_algorithm(cfg["algorithm"])
    cfg["algorithm"] = cfg["algorithm"].lower()
    if not math.isfinite(cfg["hash_timeout"]) or cfg["hash_timeout"] <= 0:
        raise ValueError("hash_timeout must be a positive, finite number of seconds")
    return cfg
