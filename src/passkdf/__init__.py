"""
passkdf - password hashing with scrypt, bcrypt and Argon2 in PHC string format.
"""

from .codec import EncodedHash, decode, encode
from .errors import (
    DecodeError,
    DerivationFailed,
    InsecureArgument,
    KDFError,
    MalformedEncoding,
    MalformedFormat,
    MalformedParams,
    NoMatch,
    UnknownAlgorithm,
    UnsupportedAlgorithm,
)
from .hashing import compare, hash_secret, verify
from .registry import Algorithm, AlgorithmSpec, resolve

__version__ = "0.1.0"

__all__ = [
    "Algorithm",
    "AlgorithmSpec",
    "DecodeError",
    "DerivationFailed",
    "EncodedHash",
    "InsecureArgument",
    "KDFError",
    "MalformedEncoding",
    "MalformedFormat",
    "MalformedParams",
    "NoMatch",
    "UnknownAlgorithm",
    "UnsupportedAlgorithm",
    "compare",
    "decode",
    "encode",
    "hash_secret",
    "resolve",
    "verify",
]
