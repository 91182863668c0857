"""SIMON-128/256 style block cipher (72 rounds) as used by X-Argus.

Blocks are two little-endian uint64 words; keys are four. `mode` selects the
round function: 1 = rol(y, 1), anything else = rol(y, 1) & rol(y, 8).
"""
from __future__ import annotations
import struct
from typing import Sequence, Tuple

MASK64 = 0xFFFFFFFFFFFFFFFF
ROUNDS = 72
Z = 0x3DC94C3A046D678B

Block = Tuple[int, int]


def rotl(v: int, n: int) -> int:
    return ((v << n) | (v >> (64 - n))) & MASK64


def rotr(v: int, n: int) -> int:
    return ((v >> n) | (v << (64 - n))) & MASK64


def get_bit(val: int, pos: int) -> int:
    return (val >> pos) & 1


def key_expansion(key: Sequence[int]) -> Tuple[int, ...]:
    k0, k1, k2, k3 = key
    ks = [k0 & MASK64, k1 & MASK64, k2 & MASK64, k3 & MASK64]
    for i in range(4, ROUNDS):
        tmp = rotr(ks[i - 1], 3) ^ ks[i - 3]
        tmp ^= rotr(tmp, 1)
        ks.append((~ks[i - 4] & MASK64) ^ tmp ^ get_bit(Z, (i - 4) % 62) ^ 3)
    return tuple(ks)


def _f(v: int, mode: int) -> int:
    if mode == 1:
        return rotl(v, 1)
    return rotl(v, 1) & rotl(v, 8)


def simon_enc(pt: Sequence[int], schedule: Sequence[int], mode: int = 0) -> Block:
    x, y = pt
    for i in range(ROUNDS):
        x, y = y, x ^ _f(y, mode) ^ rotl(y, 2) ^ schedule[i]
    return x, y


def simon_dec(ct: Sequence[int], schedule: Sequence[int], mode: int = 0) -> Block:
    x, y = ct
    for i in range(ROUNDS - 1, -1, -1):
        x, y = y ^ _f(x, mode) ^ rotl(x, 2) ^ schedule[i], x
    return x, y


def encrypt_bytes(data: bytes, key: Sequence[int], mode: int = 0) -> bytes:
    """Encrypt a buffer whose length is a multiple of 16, block by block."""
    if len(data) % 16:
        raise ValueError(f"buffer length {len(data)} is not a multiple of 16")
    schedule = key_expansion(key)
    out = bytearray()
    for i in range(0, len(data), 16):
        out += struct.pack("<QQ", *simon_enc(struct.unpack("<QQ", data[i:i + 16]), schedule, mode))
    return bytes(out)


def decrypt_bytes(data: bytes, key: Sequence[int], mode: int = 0) -> bytes:
    if len(data) % 16:
        raise ValueError(f"buffer length {len(data)} is not a multiple of 16")
    schedule = key_expansion(key)
    out = bytearray()
    for i in range(0, len(data), 16):
        out += struct.pack("<QQ", *simon_dec(struct.unpack("<QQ", data[i:i + 16]), schedule, mode))
    return bytes(out)
