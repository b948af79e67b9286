#!/usr/bin/env python3
"""
otp_cli.py — command line front-end for the HOTP key.

Subcommands:
- run  : interactive key; Enter = button press, prints each typed code
- code : one HOTP code for a given secret and counter
- uri  : otpauth://hotp URI for enrolling a secret in a verifier

Check codes with any HOTP verifier set to the same secret, counter, digits and
algorithm (sha256 unless --algorithm says otherwise).
"""

import argparse
import logging
import sys

from . import otp_core
from .adapters import ConsoleKeyboard, ConsoleTriggerSource
from .code_generator import CodeGenerator
from .config import load_config
from .errors import HotpError
from .hash_service import HmacService
from .secret_store import SecretStore
from .session import USAGE, SessionController

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def _config_from_args(args) -> dict:
    return load_config({
        "digits": args.digits,
        "algorithm": args.algorithm,
        "hash_timeout": getattr(args, "timeout", None),
    })


# --- CLI command handlers ---
def cmd_run(args):
    overrides = {
        "digits": args.digits,
        "algorithm": args.algorithm,
        "hash_timeout": args.timeout,
        "default_secret": args.secret,
    }
    if args.no_default:
        overrides["auto_provision"] = False
    elif args.secret:
        overrides["auto_provision"] = True
    cfg = load_config(overrides)

    store = SecretStore()
    with HmacService(cfg["algorithm"], cfg["hash_timeout"]) as service:
        generator = CodeGenerator(service, cfg["digits"])
        controller = SessionController(store, generator, ConsoleKeyboard(), algorithm=cfg["algorithm"])
        print(USAGE)
        controller.start(cfg["default_secret"] if cfg["auto_provision"] else None)
        controller.run(ConsoleTriggerSource())
    print("Bye.")


def cmd_code(args):
    cfg = _config_from_args(args)
    secret = otp_core.decode_base32_secret(args.secret)
    with HmacService(cfg["algorithm"], cfg["hash_timeout"]) as service:
        code = CodeGenerator(service, cfg["digits"]).generate(secret, args.counter)
    print(f"HOTP({cfg['digits']}d, {cfg['algorithm']}, counter={args.counter}): {code}")


def cmd_uri(args):
    cfg = _config_from_args(args)
    secret = otp_core.decode_base32_secret(args.secret)
    uri = otp_core.format_otpauth_uri(
        secret,
        counter=args.counter,
        account=args.account,
        issuer=args.issuer,
        digits=cfg["digits"],
        algorithm=cfg["algorithm"],
    )
    print("HOTP URI:")
    print(uri)


def cmd_help(args):
    print("'hotp-key -h' for help.")


# --- Argparse builder ---
def _add_code_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--digits", type=int, help="Number of code digits (1-9, default 6)")
    p.add_argument("--algorithm", choices=sorted(otp_core.ALGORITHMS), help="HMAC algorithm (default sha256)")
    p.add_argument("--verbose", action="store_true", help="Verbose output")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Single-slot HOTP security key (RFC 4226, HMAC-SHA256)")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help, verbose=False)

    # run
    pr = sub.add_parser("run", help="Interactive key: press Enter for the next code")
    pr.add_argument("--secret", help="Base32 secret to program at startup (default: 'test')")
    pr.add_argument("--no-default", action="store_true", help="Start unconfigured")
    pr.add_argument("--timeout", type=float, help="HMAC completion timeout in seconds")
    _add_code_options(pr)
    pr.set_defaults(func=cmd_run)

    # code
    pc = sub.add_parser("code", help="Generate the HOTP code for a specific counter")
    pc.add_argument("--secret", required=True, help="Base32 secret")
    pc.add_argument("--counter", type=int, required=True)
    _add_code_options(pc)
    pc.set_defaults(func=cmd_code)

    # uri
    pu = sub.add_parser("uri", help="Print the otpauth://hotp URI for a secret")
    pu.add_argument("--secret", required=True, help="Base32 secret")
    pu.add_argument("--counter", type=int, default=0, help="Next counter value")
    pu.add_argument("--account", default="security-key")
    pu.add_argument("--issuer", default="hotp-key")
    _add_code_options(pu)
    pu.set_defaults(func=cmd_uri)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    try:
        args.func(args)
    except (HotpError, ValueError) as e:
        print(f"[!] {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
