"""SM3 hash (32-byte digest, Merkle-Damgard over 64-byte blocks).

Used by X-Argus for the body/query digests. Pure Python; every digest call
owns its own chaining value, so instances are safe to share.
"""
from __future__ import annotations
import struct
from typing import List, Sequence, Tuple

MASK32 = 0xFFFFFFFF

IV: Tuple[int, ...] = (
    0x7380166F, 0x4914B2B9, 0x172442D7, 0xDA8A0600,
    0xA96F30BC, 0x163138AA, 0xE38DEE4D, 0xB0FB0E4E,
)

# round constants: 0..15 and 16..63
TJ: Tuple[int, ...] = tuple(0x79CC4519 if j < 16 else 0x7A879D8A for j in range(64))


def rotl(x: int, k: int) -> int:
    k %= 32
    return ((x << k) & MASK32) | ((x & MASK32) >> (32 - k))


def ffj(x: int, y: int, z: int, j: int) -> int:
    if j < 16:
        return x ^ y ^ z
    return (x & y) | (x & z) | (y & z)


def ggj(x: int, y: int, z: int, j: int) -> int:
    if j < 16:
        return x ^ y ^ z
    return (x & y) | (~x & MASK32 & z)


def p0(x: int) -> int:
    return x ^ rotl(x, 9) ^ rotl(x, 17)


def p1(x: int) -> int:
    return x ^ rotl(x, 15) ^ rotl(x, 23)


def pad(msg: bytes) -> bytes:
    bit_len = len(msg) * 8
    m = bytearray(msg)
    m.append(0x80)
    while len(m) % 64 != 56:
        m.append(0)
    m += struct.pack(">Q", bit_len & 0xFFFFFFFFFFFFFFFF)
    return bytes(m)


def cf(vi: Sequence[int], block: bytes) -> List[int]:
    """Compression function: one 64-byte block into the chaining value."""
    w = list(struct.unpack(">16I", block))
    for j in range(16, 68):
        w.append(p1(w[j - 16] ^ w[j - 9] ^ rotl(w[j - 3], 15)) ^ rotl(w[j - 13], 7) ^ w[j - 6])
    w1 = [w[j] ^ w[j + 4] for j in range(64)]

    a, b, c, d, e, f, g, h = vi
    for j in range(64):
        a12 = rotl(a, 12)
        ss1 = rotl((a12 + e + rotl(TJ[j], j)) & MASK32, 7)
        ss2 = ss1 ^ a12
        tt1 = (ffj(a, b, c, j) + d + ss2 + w1[j]) & MASK32
        tt2 = (ggj(e, f, g, j) + h + ss1 + w[j]) & MASK32
        d = c
        c = rotl(b, 9)
        b = a
        a = tt1
        h = g
        g = rotl(f, 19)
        f = e
        e = p0(tt2)

    return [x ^ y for x, y in zip((a, b, c, d, e, f, g, h), vi)]


def sm3_hash(msg: bytes) -> bytes:
    m = pad(bytes(msg))
    v = list(IV)
    for i in range(0, len(m), 64):
        v = cf(v, m[i:i + 64])
    return struct.pack(">8I", *v)


class SM3:
    """Object wrapper kept for callers that hold a hasher instance."""

    def hash(self, msg: bytes) -> bytes:
        return sm3_hash(msg)

    def hexdigest(self, msg: bytes) -> str:
        return sm3_hash(msg).hex()
