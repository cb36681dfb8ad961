"""
app.py - CLI entrypoint

Commands list:
- hash: derive a PHC hash string from a secret and print it
- compare: check a secret against a PHC hash string (prints ok / fail)
- bench: time hash and compare for the fixed parameters on this machine

Secrets are read from a no-echo prompt or stdin. Passing one as a positional
argument requires --insecure.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from . import bench
from . import hashing
from . import registry
from .config import get_settings
from .errors import KDFError, NoMatch
from .observability import setup_logging
from .secret_input import read_secret


logger = logging.getLogger(__name__)


def cmd_hash(args: argparse.Namespace) -> int:
    secret = read_secret("Enter password to hash: ", args.input, insecure=args.insecure)
    print(hashing.hash_secret(secret, args.alg))
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    secret = read_secret("Enter password to compare: ", args.input, insecure=args.insecure)
    hashing.verify(args.phc_hash, secret)
    print("ok")
    return 0


def cmd_bench(args: argparse.Namespace) -> int:
    names = [args.alg] if args.alg else registry.names()
    print("== KDF BENCH ==")
    for r in bench.bench_all(names, rounds=args.rounds):
        print(
            f"{r['algorithm']:<9} hash={r['hash_median_ms']:.1f}ms "
            f"compare={r['compare_median_ms']:.1f}ms rounds={r['rounds']}"
        )
    return 0


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return n


def build_parser(default_alg: str = registry.Algorithm.SCRYPT.value) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="passkdf", description="key derivation functions for password hashing and verification"
    )
    p.add_argument("--log-level", default=None, help="Override PASSKDF_LOG_LEVEL (e.g. DEBUG)")

    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("hash", help="Derive a PHC hash string from a secret (e.g., a password)")
    s.add_argument("input", nargs="?", default=None, metavar="INPUT",
                   help="Secret to hash; not recommended, requires --insecure")
    s.add_argument("--alg", choices=registry.names(), default=default_alg, help="KDF algorithm to use")
    s.add_argument("--insecure", action="store_true", help=argparse.SUPPRESS)
    s.set_defaults(func=cmd_hash)

    s = sub.add_parser("compare", help="Compare a secret with a PHC hash string")
    s.add_argument("phc_hash", metavar="PHC_HASH")
    s.add_argument("input", nargs="?", default=None, metavar="INPUT",
                   help="Secret to compare; not recommended, requires --insecure")
    s.add_argument("--insecure", action="store_true", help=argparse.SUPPRESS)
    s.set_defaults(func=cmd_compare)

    s = sub.add_parser("bench", help="Time hash and compare with the fixed parameters")
    s.add_argument("--alg", choices=registry.names(), default=None, help="Only bench this algorithm")
    s.add_argument("--rounds", type=_positive_int, default=5)
    s.set_defaults(func=cmd_bench)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        return 1

    parser = build_parser(settings.default_algorithm)
    args = parser.parse_args(argv)
    setup_logging(args.log_level or settings.log_level, settings.log_format)

    try:
        return args.func(args)
    except NoMatch:
        print("fail", file=sys.stderr)
        return 1
    except KDFError as e:
        logger.debug("command failed", extra={"field": e.field})
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
