"""
registry.py - The fixed set of supported KDFs.

Responsibilities:
- Bind each algorithm name to safe, fixed parameters and a derivation function
- Resolve user-facing names (hash) and PHC ids (compare) to an AlgorithmSpec
- Generate per-hash salts

Parameters below are constants. Callers choose an algorithm, never its cost.

- scrypt:   N=2**15 (ln=15), r=8, p=1 via cryptography's Scrypt.
- bcrypt:   cost 10 via the bcrypt package; it embeds its own salt and cost
            in its output so no salt is generated here.
- argon2id: m=64 MiB, t=3, p=4 (RFC 9106 low-memory profile) via argon2-cffi.
- argon2i:  same parameters, data-independent variant.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Tuple, Union

import bcrypt
from argon2.exceptions import HashingError
from argon2.low_level import ARGON2_VERSION, Type, hash_secret_raw
from cryptography.exceptions import UnsupportedAlgorithm as BackendUnsupported
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from .errors import DerivationFailed, UnknownAlgorithm, UnsupportedAlgorithm


ParamValue = Union[int, str]
Params = Tuple[Tuple[str, ParamValue], ...]
DeriveFn = Callable[..., bytes]

DEFAULT_KEY_LENGTH = 32  # bytes of derived key written by hash
SALT_LENGTH = 16
BCRYPT_COST = 10

SCRYPT_LN = 15  # N = 32768
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_MAX_LN = 63
SCRYPT_MAX_MEMORY = 1 << 64  # 128*r*(N+p+2) bytes must stay below u64 in the backend
SCRYPT_MAX_RP = 1 << 30  # RFC 7914: r*p < 2**30
BCRYPT_MAX_SECRET = 72
ARGON2_VERSIONS = (0x10, 0x13)

ARGON2_MEMORY_COST = 65536  # KiB
ARGON2_TIME_COST = 3
ARGON2_PARALLELISM = 4
ARGON2_LEGACY_VERSION = 0x10  # assumed when a string carries no v= segment


class Algorithm(str, Enum):
    SCRYPT = "scrypt"
    BCRYPT = "bcrypt"
    ARGON2ID = "argon2id"
    ARGON2I = "argon2i"


@dataclass(frozen=True)
class AlgorithmSpec:
    """One supported KDF and everything needed to run and encode it."""

    algorithm: Algorithm
    identifier: str
    params: Params = ()
    schema: Tuple[Tuple[str, type], ...] = ()
    version: Optional[int] = None
    accepted_versions: Tuple[int, ...] = ()
    derive: Optional[DeriveFn] = None
    native_hash: Optional[Callable[[bytes], str]] = None
    native_verify: Optional[Callable[[str, bytes], bool]] = None
    aliases: Tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.algorithm.value

    @property
    def self_encoding(self) -> bool:
        return self.native_hash is not None

    @property
    def versioned(self) -> bool:
        return self.version is not None

    @property
    def identifiers(self) -> Tuple[str, ...]:
        return (self.identifier,) + self.aliases


def new_salt(length: int = SALT_LENGTH) -> bytes:
    """Generate a fresh random salt from the OS CSPRNG."""
    return os.urandom(length)


def _derive_scrypt(
    secret: bytes, salt: bytes, params: Mapping[str, ParamValue], length: int, version: Optional[int] = None
) -> bytes:
    ln, r, p = int(params["ln"]), int(params["r"]), int(params["p"])
    if not 1 <= ln <= SCRYPT_MAX_LN:
        raise DerivationFailed("scrypt", f"ln={ln} out of range")
    if r * p >= SCRYPT_MAX_RP:
        raise DerivationFailed("scrypt", f"r*p={r * p} out of range")
    if 128 * r * ((1 << ln) + p + 2) >= SCRYPT_MAX_MEMORY:
        raise DerivationFailed("scrypt", f"ln={ln}, r={r}, p={p} exceed addressable memory")
    try:
        kdf = Scrypt(salt=salt, length=length, n=1 << ln, r=r, p=p)
        return kdf.derive(secret)
    except (ValueError, OverflowError, MemoryError, BackendUnsupported) as e:
        raise DerivationFailed("scrypt", str(e) or type(e).__name__) from e


def _argon2_deriver(variant: Type, name: str) -> DeriveFn:
    def derive(
        secret: bytes, salt: bytes, params: Mapping[str, ParamValue], length: int, version: Optional[int] = None
    ) -> bytes:
        try:
            return hash_secret_raw(
                secret=secret,
                salt=salt,
                time_cost=int(params["t"]),
                memory_cost=int(params["m"]),
                parallelism=int(params["p"]),
                hash_len=length,
                type=variant,
                version=ARGON2_LEGACY_VERSION if version is None else version,
            )
        except (HashingError, ValueError, OverflowError, MemoryError) as e:
            raise DerivationFailed(name, str(e) or type(e).__name__) from e

    return derive


def _bcrypt_hash(secret: bytes) -> str:
    try:
        return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=BCRYPT_COST)).decode("ascii")
    except ValueError as e:
        raise DerivationFailed("bcrypt", str(e)) from e


def _bcrypt_verify(encoded: str, candidate: bytes) -> bool:
    # bcrypt never hashes more than 72 bytes, so a longer candidate cannot match
    if len(candidate) > BCRYPT_MAX_SECRET:
        return False
    try:
        return bcrypt.checkpw(candidate, encoded.encode("ascii"))
    except ValueError as e:
        raise DerivationFailed("bcrypt", str(e)) from e


_ARGON2_PARAMS: Params = (("m", ARGON2_MEMORY_COST), ("t", ARGON2_TIME_COST), ("p", ARGON2_PARALLELISM))
_ARGON2_SCHEMA = (("m", int), ("t", int), ("p", int))

_SPECS = (
    AlgorithmSpec(
        algorithm=Algorithm.SCRYPT,
        identifier="scrypt",
        params=(("ln", SCRYPT_LN), ("r", SCRYPT_R), ("p", SCRYPT_P)),
        schema=(("ln", int), ("r", int), ("p", int)),
        derive=_derive_scrypt,
    ),
    AlgorithmSpec(
        algorithm=Algorithm.BCRYPT,
        identifier="2b",
        aliases=("2a", "2y"),
        native_hash=_bcrypt_hash,
        native_verify=_bcrypt_verify,
    ),
    AlgorithmSpec(
        algorithm=Algorithm.ARGON2ID,
        identifier="argon2id",
        params=_ARGON2_PARAMS,
        schema=_ARGON2_SCHEMA,
        version=ARGON2_VERSION,
        accepted_versions=ARGON2_VERSIONS,
        derive=_argon2_deriver(Type.ID, "argon2id"),
    ),
    AlgorithmSpec(
        algorithm=Algorithm.ARGON2I,
        identifier="argon2i",
        params=_ARGON2_PARAMS,
        schema=_ARGON2_SCHEMA,
        version=ARGON2_VERSION,
        accepted_versions=ARGON2_VERSIONS,
        derive=_argon2_deriver(Type.I, "argon2i"),
    ),
)

# Built once at import, read-only afterwards.
_BY_NAME: Mapping[str, AlgorithmSpec] = MappingProxyType({s.name: s for s in _SPECS})
_BY_ID: Mapping[str, AlgorithmSpec] = MappingProxyType(
    {ident: s for s in _SPECS for ident in s.identifiers}
)


def resolve(name: Union[str, Algorithm]) -> AlgorithmSpec:
    """Look up an algorithm by its user-facing name (e.g. 'scrypt')."""
    key = name.value if isinstance(name, Algorithm) else name
    spec = _BY_NAME.get(key)
    if spec is None:
        raise UnsupportedAlgorithm(str(key))
    return spec


def from_identifier(identifier: str) -> AlgorithmSpec:
    """Look up an algorithm by the id tag found in an encoded hash."""
    spec = _BY_ID.get(identifier)
    if spec is None:
        raise UnknownAlgorithm(identifier)
    return spec


def names() -> List[str]:
    return [s.name for s in _SPECS]
