"""Hash codec — PHC string encoding and strict decoding.

Tests cover:
    - Round-trip for every PHC-form algorithm, parameter order preserved
    - bcrypt strings pass through unchanged
    - Every malformed input maps to exactly one documented error
    - Base64 is unpadded, canonical, standard alphabet
"""

import pytest

from passkdf import codec
from passkdf.codec import EncodedHash
from passkdf.errors import (
    DecodeError,
    MalformedEncoding,
    MalformedFormat,
    MalformedParams,
    UnknownAlgorithm,
)
from passkdf.registry import resolve


SALT = bytes(range(16))
KEY = bytes(range(100, 132))
SALT_B64 = "AAECAwQFBgcICQoLDA0ODw"


# --- Encoding -----------------------------------------------------------------

def test_encode_scrypt_shape():
    h = EncodedHash(id="scrypt", params=(("ln", 15), ("r", 8), ("p", 1)), salt=SALT, key=KEY)
    s = codec.encode(h)
    fields = s.split("$")
    assert fields[0] == ""
    assert fields[1] == "scrypt"
    assert fields[2] == "ln=15,r=8,p=1"
    assert fields[3] == SALT_B64
    assert len(fields) == 5
    assert "=" not in fields[3] + fields[4]


def test_encode_argon2_includes_version():
    h = EncodedHash(id="argon2id", params=(("m", 65536), ("t", 3), ("p", 4)), salt=SALT, key=KEY, version=19)
    assert codec.encode(h).startswith("$argon2id$v=19$m=65536,t=3,p=4$" + SALT_B64 + "$")


def test_b64_encode_drops_padding():
    assert codec.b64_encode(b"\x00") == "AA"
    assert codec.b64_encode(b"\x00\x00") == "AAA"
    assert codec.b64_encode(b"\x00\x00\x00") == "AAAA"


# --- Round-trip ---------------------------------------------------------------

@pytest.mark.parametrize(
    "h",
    [
        EncodedHash(id="scrypt", params=(("ln", 15), ("r", 8), ("p", 1)), salt=SALT, key=KEY),
        EncodedHash(id="scrypt", params=(("p", 2), ("ln", 10), ("r", 16)), salt=b"\xff", key=b"\x00" * 64),
        EncodedHash(id="argon2id", params=(("m", 65536), ("t", 3), ("p", 4)), salt=SALT, key=KEY, version=19),
        EncodedHash(id="argon2i", params=(("t", 2), ("m", 1024), ("p", 1)), salt=SALT[:8], key=KEY[:5]),
    ],
)
def test_round_trip(h):
    assert codec.decode(codec.encode(h)) == h


def test_round_trip_preserves_param_order():
    h = EncodedHash(id="scrypt", params=(("r", 8), ("p", 1), ("ln", 15)), salt=SALT, key=KEY)
    decoded = codec.decode(codec.encode(h))
    assert [name for name, _ in decoded.params] == ["r", "p", "ln"]


def test_bcrypt_passthrough():
    native = "$2b$10$" + "N9qo8uLOickgx2ZMRZoMye" + "IjZAgcfl7p92ldGxad68LJZdL17lhWy"
    h = codec.decode(native)
    assert h.id == "2b"
    assert h.params == ()
    assert h.salt == b""
    assert h.key == native.encode("ascii")
    assert codec.encode(h) == native


@pytest.mark.parametrize("prefix", ["$2a$", "$2y$"])
def test_bcrypt_legacy_prefixes_decode(prefix):
    native = prefix + "12$" + "a" * 53
    assert codec.decode(native).id == prefix.strip("$")


# --- Decode robustness --------------------------------------------------------

VALID_TAIL = "$AAAA$AAAA"


@pytest.mark.parametrize(
    "s",
    [
        "not-a-valid-hash",
        "",
        "$",
        "$$ln=15$AAAA$AAAA",
        "scrypt$ln=15,r=8,p=1$AAAA$AAAA",
        "$scrypt",
        "$scrypt$ln=15,r=8,p=1",
        "$scrypt$ln=15,r=8,p=1$AAAA",
        "$scrypt$ln=15,r=8,p=1$AAAA$AAAA$AAAA",
        "$scrypt$v=19$ln=15,r=8,p=1$AAAA$AAAA",
        "$scrypt$$AAAA$AAAA",
        "$scrypt$ln15,r=8,p=1" + VALID_TAIL,
        "$scrypt$ln=15,,p=1" + VALID_TAIL,
        "$argon2id$v=19$m=65536,t=3,p=4$AAAA",
        "$2b$10",
        "$2b$10$" + "a" * 53 + "$x",
    ],
)
def test_malformed_format(s):
    with pytest.raises(MalformedFormat):
        codec.decode(s)


def test_not_a_valid_hash_is_malformed_format():
    with pytest.raises(MalformedFormat) as exc:
        codec.decode("not-a-valid-hash")
    assert exc.value.field == "hash"


@pytest.mark.parametrize("s", ["$md5$x=1$AAAA$AAAA", "$SCRYPT$ln=15,r=8,p=1$AAAA$AAAA", "$pbkdf2$"])
def test_unknown_algorithm(s):
    with pytest.raises(UnknownAlgorithm):
        codec.decode(s)


@pytest.mark.parametrize(
    "s, field",
    [
        ("$scrypt$ln=x,r=8,p=1" + VALID_TAIL, "ln"),
        ("$scrypt$ln=15,r=-8,p=1" + VALID_TAIL, "r"),
        ("$scrypt$ln=15,r=8,p=1.5" + VALID_TAIL, "p"),
        ("$scrypt$ln=,r=8,p=1" + VALID_TAIL, "ln"),
        ("$scrypt$r=8,p=1" + VALID_TAIL, "ln"),
        ("$scrypt$ln=15,r=8" + VALID_TAIL, "p"),
        ("$scrypt$ln=15,r=8,p=1,q=2" + VALID_TAIL, "q"),
        ("$scrypt$ln=15,ln=15,r=8,p=1" + VALID_TAIL, "ln"),
        ("$scrypt$ln=99999999999,r=8,p=1" + VALID_TAIL, "ln"),
        ("$argon2id$v=x$m=65536,t=3,p=4" + VALID_TAIL, "v"),
        ("$argon2id$v=99$m=65536,t=3,p=4" + VALID_TAIL, "v"),
        ("$argon2i$v=0$m=65536,t=3,p=4" + VALID_TAIL, "v"),
        ("$argon2id$v=19$m=65536,t=3" + VALID_TAIL, "p"),
        ("$2b$1x$" + "a" * 53, "cost"),
        ("$2b$100$" + "a" * 53, "cost"),
    ],
)
def test_malformed_params(s, field):
    with pytest.raises(MalformedParams) as exc:
        codec.decode(s)
    assert exc.value.field == field
    assert field in str(exc.value)


@pytest.mark.parametrize(
    "s, field",
    [
        ("$scrypt$ln=15,r=8,p=1$$AAAA", "salt"),
        ("$scrypt$ln=15,r=8,p=1$AAAA$", "hash"),
        ("$scrypt$ln=15,r=8,p=1$AA==$AAAA", "salt"),
        ("$scrypt$ln=15,r=8,p=1$A$AAAA", "salt"),
        ("$scrypt$ln=15,r=8,p=1$AB$AAAA", "salt"),
        ("$scrypt$ln=15,r=8,p=1$AAAA$A!AA", "hash"),
        ("$scrypt$ln=15,r=8,p=1$AAAA$AA-_", "hash"),
        ("$scrypt$ln=15,r=8,p=1$AAAA$AAAAé", "hash"),
        ("$2b$10$short", "hash"),
        ("$2b$10$" + "+" * 53, "hash"),
    ],
)
def test_malformed_encoding(s, field):
    with pytest.raises(MalformedEncoding) as exc:
        codec.decode(s)
    assert exc.value.field == field


def test_all_decode_errors_share_base():
    for s in ["junk", "$scrypt$ln=x,r=8,p=1$AAAA$AAAA", "$scrypt$ln=15,r=8,p=1$A$AAAA"]:
        with pytest.raises(DecodeError):
            codec.decode(s)


def test_decode_rejects_non_string():
    with pytest.raises(MalformedFormat):
        codec.decode(b"$scrypt$ln=15,r=8,p=1$AAAA$AAAA")


def test_argon2_without_version_segment():
    h = codec.decode("$argon2id$m=65536,t=3,p=4$" + SALT_B64 + "$AAAA")
    assert h.version is None
    assert h.salt == SALT


def test_decoded_id_is_known_to_registry():
    h = codec.decode("$scrypt$ln=15,r=8,p=1$" + SALT_B64 + "$AAAA")
    assert resolve("scrypt").identifier == h.id
    assert h.param_map() == {"ln": 15, "r": 8, "p": 1}


@pytest.mark.parametrize("version", [16, 19])
def test_argon2_published_versions_decode(version):
    h = codec.decode(f"$argon2id$v={version}$m=65536,t=3,p=4${SALT_B64}$AAAA")
    assert h.version == version
