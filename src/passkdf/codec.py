"""
codec.py - PHC string format for derived keys.

Responsibilities:
- Encode an EncodedHash as  $<id>[$v=<version>]$<k>=<v>,...$<salt>$<key>
- Decode such strings back, rejecting anything malformed with a typed error
- Pass bcrypt's own $2b$<cost>$<salt+hash> strings through untouched

Salt and key use standard base64 without '=' padding, as the PHC string
format and argon2-cffi do. Decoding insists on the canonical form so that
decode(encode(h)) == h and encode(decode(s)) == s.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from . import registry
from .errors import MalformedEncoding, MalformedFormat, MalformedParams
from .registry import AlgorithmSpec, ParamValue, Params


_B64_RE = re.compile(r"[A-Za-z0-9+/]*")
_DIGITS_RE = re.compile(r"[0-9]+")
_NAME_RE = re.compile(r"[a-z0-9-]+")
_STR_VALUE_RE = re.compile(r"[A-Za-z0-9/+.-]+")
_BCRYPT_BODY_RE = re.compile(r"[./A-Za-z0-9]{53}")
_MAX_DIGITS = 10  # parameter values are 32-bit decimals in PHC strings


@dataclass(frozen=True)
class EncodedHash:
    """
    Decoded form of a hash string.

    For bcrypt, params and salt are empty and key holds the whole native
    string (ASCII), which bcrypt's own verifier consumes.
    """

    id: str
    params: Params
    salt: bytes
    key: bytes
    version: Optional[int] = None

    def param_map(self) -> Dict[str, ParamValue]:
        return dict(self.params)


def b64_encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii").rstrip("=")


def b64_decode(text: str, field: str) -> bytes:
    """Decode unpadded standard base64; raise MalformedEncoding otherwise."""
    if not text:
        raise MalformedEncoding(f"{field} is empty", field=field)
    if not _B64_RE.fullmatch(text) or len(text) % 4 == 1:
        raise MalformedEncoding(f"{field} is not valid unpadded base64", field=field)
    try:
        data = base64.b64decode(text + "=" * (-len(text) % 4), validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedEncoding(f"{field} is not valid unpadded base64", field=field) from e
    if b64_encode(data) != text:
        raise MalformedEncoding(f"{field} has non-canonical base64 trailing bits", field=field)
    return data


def _format_params(params: Params) -> str:
    return ",".join(f"{name}={value}" for name, value in params)


def encode(h: EncodedHash) -> str:
    """Format h as a PHC string. bcrypt hashes are returned as stored."""
    spec = registry.from_identifier(h.id)
    if spec.self_encoding:
        return h.key.decode("ascii")

    fields: List[str] = ["", h.id]
    if h.version is not None:
        fields.append(f"v={h.version}")
    fields.append(_format_params(h.params))
    fields.append(b64_encode(h.salt))
    fields.append(b64_encode(h.key))
    return "$".join(fields)


def _parse_params(segment: str, spec: AlgorithmSpec) -> Params:
    if not segment:
        raise MalformedFormat("parameter segment is empty", field="params")

    schema = dict(spec.schema)
    seen: Dict[str, ParamValue] = {}
    out: List[Tuple[str, ParamValue]] = []
    for item in segment.split(","):
        name, sep, raw = item.partition("=")
        if not sep or not name:
            raise MalformedFormat(f"parameter '{item}' is not of the form name=value", field="params")
        if not _NAME_RE.fullmatch(name):
            raise MalformedParams(f"invalid parameter name '{name}'", field=name)
        if name not in schema:
            raise MalformedParams(f"unexpected parameter '{name}' for {spec.name}", field=name)
        if name in seen:
            raise MalformedParams(f"duplicate parameter '{name}'", field=name)

        value: ParamValue
        if schema[name] is int:
            if not _DIGITS_RE.fullmatch(raw) or len(raw) > _MAX_DIGITS:
                raise MalformedParams(f"parameter '{name}' must be numeric, got '{raw}'", field=name)
            value = int(raw)
        else:
            if not _STR_VALUE_RE.fullmatch(raw):
                raise MalformedParams(f"parameter '{name}' has invalid value '{raw}'", field=name)
            value = raw
        seen[name] = value
        out.append((name, value))

    for name, _kind in spec.schema:
        if name not in seen:
            raise MalformedParams(f"missing required parameter '{name}'", field=name)
    return tuple(out)


def _decode_bcrypt(s: str, parts: List[str]) -> EncodedHash:
    # ["", "2b", "10", "<22 salt chars><31 hash chars>"]
    if len(parts) != 4:
        raise MalformedFormat("bcrypt hash must have 3 '$'-separated fields", field="hash")
    cost, body = parts[2], parts[3]
    if len(cost) != 2 or not _DIGITS_RE.fullmatch(cost):
        raise MalformedParams(f"bcrypt cost must be two digits, got '{cost}'", field="cost")
    if not _BCRYPT_BODY_RE.fullmatch(body):
        raise MalformedEncoding("bcrypt salt/hash is not 53 bcrypt-base64 characters", field="hash")
    return EncodedHash(id=parts[1], params=(), salt=b"", key=s.encode("ascii"))


def decode(s: str) -> EncodedHash:
    """
    Parse a hash string.

    Raises MalformedFormat, UnknownAlgorithm, MalformedParams or
    MalformedEncoding; never anything else for str input.
    """
    if not isinstance(s, str):
        raise MalformedFormat("hash must be a string", field="hash")

    parts = s.split("$")
    if parts[0] != "" or len(parts) < 2 or not parts[1]:
        raise MalformedFormat("cannot decode password hash: expected '$<id>$...'", field="hash")

    identifier = parts[1]
    spec = registry.from_identifier(identifier)
    if spec.self_encoding:
        if not s.isascii():
            raise MalformedEncoding("bcrypt hash must be ASCII", field="hash")
        return _decode_bcrypt(s, parts)

    rest = parts[2:]
    version: Optional[int] = None
    if spec.versioned and rest and rest[0].startswith("v="):
        raw = rest[0][2:]
        if not _DIGITS_RE.fullmatch(raw) or len(raw) > _MAX_DIGITS:
            raise MalformedParams(f"version must be numeric, got '{raw}'", field="v")
        version = int(raw)
        if version not in spec.accepted_versions:
            raise MalformedParams(f"unsupported {spec.name} version {version}", field="v")
        rest = rest[1:]

    if len(rest) != 3:
        raise MalformedFormat(
            f"{spec.name} hash must have params, salt and hash fields, got {len(rest)} field(s)",
            field="hash",
        )

    params = _parse_params(rest[0], spec)
    salt = b64_decode(rest[1], "salt")
    key = b64_decode(rest[2], "hash")
    return EncodedHash(id=identifier, params=params, salt=salt, key=key, version=version)
