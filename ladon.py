"""X-Ladon: MD5-keyed 34-round rotate/add/xor block transform over "khronos-lc_id-aid"."""
from __future__ import annotations
import struct, logging
from typing import List, Optional

from crypto import b64, md5_hex
from utils import random_bytes as _random_bytes

signing_logger = logging.getLogger('signing')

MASK64 = 0xFFFFFFFFFFFFFFFF
ROUNDS = 0x22
TABLE_SIZE = 272 + 16
NONCE_SIZE = 4


def ror64(value: int, count: int) -> int:
    return ((value >> count) | (value << (64 - count))) & MASK64


def build_hash_table(md5hex: bytes) -> bytearray:
    """Expand the 32 ASCII hex chars into the round-key table (uint64 LE words)."""
    table = bytearray(TABLE_SIZE)
    table[:32] = md5hex[:32]
    temp: List[int] = list(struct.unpack_from("<4Q", table, 0))

    buffer_b0, buffer_b8 = temp.pop(0), temp.pop(0)
    for i in range(ROUNDS):
        x9, x8 = buffer_b0, buffer_b8
        x8 = (ror64(x8, 8) + x9) & MASK64
        x8 ^= i
        temp.append(x8)
        x8 ^= ror64(x9, 61)
        struct.pack_into("<Q", table, (i + 1) * 8, x8)
        buffer_b0 = x8
        buffer_b8 = temp.pop(0)
    return table


def encrypt_ladon_input(hash_table: bytes, block: bytes) -> bytes:
    data0, data1 = struct.unpack("<QQ", block)
    for i in range(ROUNDS):
        (h,) = struct.unpack_from("<Q", hash_table, i * 8)
        data1 = (h ^ ((data0 + ror64(data1, 8)) & MASK64)) & MASK64
        data0 = (data1 ^ ror64(data0, 61)) & MASK64
    return struct.pack("<QQ", data0, data1)


def padding_size(size: int) -> int:
    mod = size % 16
    return size + (16 - mod) if mod else size


def pad_input(data: bytes) -> bytes:
    # PKCS#7 into a buffer rounded up to 16; an already aligned input has no
    # room left and goes out unpadded
    new_size = padding_size(len(data))
    pad_byte = 16 - len(data) % 16
    if len(data) + pad_byte > new_size:
        return bytes(data)
    return bytes(data) + bytes([pad_byte]) * pad_byte


def encrypt_ladon(md5hex: bytes, data: bytes) -> bytes:
    hash_table = build_hash_table(md5hex)
    padded = pad_input(data)
    return b"".join(encrypt_ladon_input(hash_table, padded[i:i + 16]) for i in range(0, len(padded), 16))


def ladon_encrypt(khronos: int, lc_id: int = 1611921764, aid: int = 1233,
                  random_bytes: Optional[bytes] = None) -> str:
    if random_bytes is None:
        random_bytes = _random_bytes(NONCE_SIZE)
    data = f"{khronos}-{lc_id}-{aid}".encode()
    keygen = random_bytes + str(aid).encode()
    cipher = encrypt_ladon(md5_hex(keygen).encode(), data)
    signing_logger.debug(f"ladon data {data!r} nonce {random_bytes.hex()}")
    return b64(random_bytes + cipher)

