"""X-Argus: codec payload -> SIMON -> wrapper -> AES-CBC -> base64.

The field order, the wrapper markers and both keys are fixed by the
verifier; changing any of them yields a header that is silently rejected.
"""
from __future__ import annotations
import random, logging
from typing import Any, Dict, Optional

from codec import ProtoBuf
from crypto import aes_cbc_encrypt, aes_cbc_decrypt, b64, b64_decode, md5_bytes, pkcs7_pad, pkcs7_unpad
from errors import MalformedField, PreconditionFailed
from sm3 import sm3_hash
from utils import query_param
import simon

signing_logger = logging.getLogger('signing')

FIELD_ORDER = (1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 12, 13, 14, 16, 20, 21, 25)
# nested messages are serialized with this key order; it is empty upstream too
NESTED_FIELD_ORDER: tuple = ()

SIGN_KEY = bytes([
    0xac, 0x1a, 0xda, 0xae, 0x95, 0xa7, 0xaf, 0x94,
    0xa5, 0x11, 0x4a, 0xb3, 0xb3, 0xa9, 0x7d, 0xd8,
    0x00, 0x50, 0xaa, 0x0a, 0x39, 0x31, 0x4c, 0x40,
    0x52, 0x8c, 0xae, 0xc9, 0x52, 0x56, 0xc2, 0x8c,
])

# precomputed SM3 digest that keys SIMON; the secret behind it never changes
SIMON_KEY_DIGEST = bytes([
    0xfc, 0x78, 0xe0, 0xa9, 0x65, 0x7a, 0x0c, 0x74,
    0x8c, 0xe5, 0x15, 0x59, 0x90, 0x3c, 0xcf, 0x03,
    0x51, 0x0e, 0x51, 0xd3, 0xcf, 0xf2, 0x32, 0xd7,
    0x13, 0x43, 0xe8, 0x8a, 0x32, 0x1c, 0x53, 0x04,
])
SIMON_KEY = tuple(int.from_bytes(SIMON_KEY_DIGEST[i:i + 8], "little") for i in range(0, 32, 8))

ENC_PB_PREFIX = bytes([0xf2, 0xf7, 0xfc, 0xff, 0xf2, 0xf7, 0xfc, 0xff])
WRAP_HEADER = bytes([0xa6, 0x6e, 0xad, 0x9f, 0x77, 0x01, 0xd0, 0x0c, 0x18])
WRAP_FOOTER = b"ao"
OUTPUT_MARKER = bytes([0xf2, 0x81])

SIGN_MAGIC = 0x20200929 << 1
VERSION_NAME = "39.6.3"


def _put_value(pb: ProtoBuf, idx: int, value: Any) -> None:
    if isinstance(value, int):
        pb.put_varint(idx, value)
    elif isinstance(value, str):
        pb.put_utf8(idx, value)
    elif isinstance(value, (bytes, bytearray)):
        pb.put_bytes(idx, value)
    elif isinstance(value, dict):
        sub = ProtoBuf()
        for sub_idx in NESTED_FIELD_ORDER:
            if sub_idx in value:
                _put_value(sub, sub_idx, value[sub_idx])
        pb.put_bytes(idx, sub.to_bytes())
    elif value is not None:
        signing_logger.warning(f"dropping field {idx}: unsupported value type {type(value).__name__}")


def build_protobuf(fields: Dict[int, Any]) -> bytes:
    pb = ProtoBuf()
    for idx in FIELD_ORDER:
        _put_value(pb, idx, fields.get(idx))
    return pb.to_bytes()


def xor_reverse(data: bytes) -> bytes:
    """XOR every byte past the first 8 with byte i % 8, then reverse the buffer."""
    out = bytearray(data)
    for i in range(8, len(out)):
        out[i] ^= out[i % 8]
    out.reverse()
    return bytes(out)


def _aes_key_iv() -> tuple:
    return md5_bytes(SIGN_KEY[:16]), md5_bytes(SIGN_KEY[16:])


def encrypt(fields: Dict[int, Any]) -> str:
    """Serialize `fields` in the fixed order and return the X-Argus value."""
    protobuf = pkcs7_pad(build_protobuf(fields))
    enc_pb = simon.encrypt_bytes(protobuf, SIMON_KEY, 0)
    signing_logger.debug(f"argus payload {len(protobuf)} bytes, enc_pb {enc_pb.hex()}")

    buf = WRAP_HEADER + xor_reverse(ENC_PB_PREFIX + enc_pb) + WRAP_FOOTER
    key, iv = _aes_key_iv()
    return b64(OUTPUT_MARKER + aes_cbc_encrypt(key, iv, buf))


def decrypt(x_argus: str) -> ProtoBuf:
    """Invert encrypt(): recover the serialized field list from a header value."""
    try:
        raw = b64_decode(x_argus)
    except ValueError as e:
        raise MalformedField(f"x-argus is not valid base64: {e}") from e
    if raw[:2] != OUTPUT_MARKER:
        raise MalformedField("x-argus does not start with the output marker")

    key, iv = _aes_key_iv()
    try:
        buf = aes_cbc_decrypt(key, iv, raw[2:])
    except ValueError as e:
        raise MalformedField(f"x-argus outer layer did not decrypt: {e}") from e
    if not (buf.startswith(WRAP_HEADER) and buf.endswith(WRAP_FOOTER)):
        raise MalformedField("x-argus wrapper markers missing")

    inner = bytearray(buf[len(WRAP_HEADER):-len(WRAP_FOOTER)])
    inner.reverse()
    for i in range(8, len(inner)):
        inner[i] ^= inner[i % 8]
    if bytes(inner[:8]) != ENC_PB_PREFIX or (len(inner) - 8) % 16:
        raise MalformedField("x-argus inner prefix or length mismatch")

    protobuf = simon.decrypt_bytes(bytes(inner[8:]), SIMON_KEY, 0)
    try:
        protobuf = pkcs7_unpad(protobuf)
    except ValueError as e:
        raise MalformedField(f"x-argus payload padding invalid: {e}") from e
    return ProtoBuf(protobuf)


def get_body_hash(stub: str = "") -> bytes:
    """First 6 bytes of SM3 over the hex-decoded X-SS-Stub (16 zero bytes when empty)."""
    data = bytes.fromhex(stub) if stub else bytes(16)
    return sm3_hash(data)[:6]


def get_query_hash(query: str = "") -> bytes:
    data = query.encode("utf-8") if query else bytes(16)
    return sm3_hash(data)[:6]


def get_sign(query: str,
             stub: str,
             timestamp: int,
             aid: int = 1233,
             license_id: int = 1611921764,
             platform: int = 0,
             sec_device_id: str = "",
             sdk_version: str = "v05.00.06-ov-android",
             sdk_version_int: int = 167775296,
             version_name: str = VERSION_NAME,
             rand: Optional[int] = None) -> str:
    """Build the X-Argus value for one request; `query` must carry device_id."""
    device_id = query_param(query, "device_id")
    if not device_id:
        raise PreconditionFailed("query string has no device_id")
    if rand is None:
        rand = random.getrandbits(31)

    # platform is accepted for signature parity but not part of the payload
    fields = {
        1: SIGN_MAGIC,
        2: 2,
        3: rand,
        4: str(aid),
        5: device_id,
        6: str(license_id),
        7: version_name,
        8: sdk_version,
        9: sdk_version_int,
        10: bytes(8),
        12: int(timestamp) << 1,
        13: get_body_hash(stub),
        14: get_query_hash(query),
        16: sec_device_id,
        20: "none",
        21: 738,
        25: 2,
    }
    return encrypt(fields)
