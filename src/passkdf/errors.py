"""
errors.py - Error taxonomy for hashing and comparison.

Every error carries the name of the offending field (or None) so the CLI can
print one precise line. NoMatch is a negative result, not a fault.
"""

from __future__ import annotations

from typing import Optional


class KDFError(Exception):
    """Base class for all passkdf errors."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def __str__(self) -> str:
        return self.message


class UnsupportedAlgorithm(KDFError):
    """Requested KDF name is not in the registry."""

    def __init__(self, name: str):
        super().__init__(f"unsupported algorithm '{name}'", field="alg")
        self.name = name


class UnknownAlgorithm(UnsupportedAlgorithm):
    """Decoded hash names an id the registry does not know."""

    def __init__(self, identifier: str):
        KDFError.__init__(self, f"invalid or unsupported hash method with id '{identifier}'", field="id")
        self.name = identifier


class DecodeError(KDFError):
    """Structural problem in an encoded hash string."""


class MalformedFormat(DecodeError):
    pass


class MalformedParams(DecodeError):
    pass


class MalformedEncoding(DecodeError):
    pass


class DerivationFailed(KDFError):
    """The underlying derivation primitive refused or failed."""

    def __init__(self, algorithm: str, reason: str):
        super().__init__(f"error deriving {algorithm} key: {reason}", field="alg")
        self.algorithm = algorithm


class NoMatch(KDFError):
    """Comparison completed and the secret did not match."""

    def __init__(self) -> None:
        super().__init__("fail")


class InsecureArgument(KDFError):
    """A secret was given on the command line without --insecure."""

    def __init__(self, argument: str):
        super().__init__(
            f"positional argument {argument} requires the '--insecure' flag", field=argument
        )
