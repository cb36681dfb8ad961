"""
hashing.py - Hash a secret and compare a candidate against a stored hash.

Responsibilities:
- hash_secret: derive with a registry algorithm and return its PHC string
- compare: re-derive from a stored PHC string and check in constant time
- verify: compare, raising NoMatch on a negative result

bcrypt manages its own salt and cost, so it is hashed and verified by the
bcrypt package directly; the other algorithms go through the codec.
"""

from __future__ import annotations

import hmac
import logging
import time
from typing import Union

from . import codec
from . import registry
from .errors import MalformedParams, NoMatch
from .registry import DEFAULT_KEY_LENGTH, AlgorithmSpec


logger = logging.getLogger(__name__)

Secret = Union[bytes, str]


def _as_bytes(secret: Secret) -> bytes:
    if isinstance(secret, str):
        return secret.encode("utf-8")
    return bytes(secret)


def hash_secret(
    secret: Secret,
    algorithm: Union[str, registry.Algorithm] = registry.Algorithm.SCRYPT,
    key_length: int = DEFAULT_KEY_LENGTH,
) -> str:
    """Return the encoded hash string (algorithm, parameters, salt and key) for secret."""
    spec = registry.resolve(algorithm)
    data = _as_bytes(secret)
    t0 = time.perf_counter()

    if spec.self_encoding:
        encoded = spec.native_hash(data)
    else:
        salt = registry.new_salt()
        key = spec.derive(data, salt, dict(spec.params), key_length, version=spec.version)
        encoded = codec.encode(
            codec.EncodedHash(id=spec.identifier, params=spec.params, salt=salt, key=key, version=spec.version)
        )

    logger.debug("hashed secret", extra={"algorithm": spec.name, "elapsed_ms": _ms_since(t0)})
    return encoded


def _check_numeric(spec: AlgorithmSpec, h: codec.EncodedHash) -> None:
    values = h.param_map()
    for name, kind in spec.schema:
        if kind is int and not isinstance(values.get(name), int):
            raise MalformedParams(f"parameter '{name}' must be numeric", field=name)


def compare(encoded: str, candidate: Secret) -> bool:
    """Return True if candidate matches the stored hash string."""
    h = codec.decode(encoded)
    spec = registry.from_identifier(h.id)
    data = _as_bytes(candidate)
    t0 = time.perf_counter()

    if spec.self_encoding:
        matched = spec.native_verify(encoded, data)
    else:
        _check_numeric(spec, h)
        recomputed = spec.derive(data, h.salt, h.param_map(), len(h.key), version=h.version)
        matched = hmac.compare_digest(recomputed, h.key)

    logger.debug("compared secret", extra={"algorithm": spec.name, "elapsed_ms": _ms_since(t0)})
    return matched


def verify(encoded: str, candidate: Secret) -> None:
    """Like compare, but raise NoMatch instead of returning False."""
    if not compare(encoded, candidate):
        raise NoMatch()


def _ms_since(t0: float) -> float:
    return round((time.perf_counter() - t0) * 1000.0, 3)
