"""X-Gorgon: MD5 base string -> fixed-key XOR -> nibble/bit shuffle."""
from __future__ import annotations
import logging
from typing import Dict

from crypto import md5_hex

signing_logger = logging.getLogger('signing')

LENGTH = 0x14
KEY = bytes([
    0xDF, 0x77, 0xB9, 0x40, 0xB9,
    0x9B, 0x84, 0x83, 0xD1, 0xB9,
    0xCB, 0xD1, 0xF7, 0xC2, 0xB9,
    0x85, 0xC3, 0xD0, 0xFB, 0xC3,
])
CONSTANT_BYTES = bytes([0x00, 0x06, 0x0B, 0x1C])
VERSION_PREFIX = "0404b0d30000"
EMPTY_MD5 = "0" * 32


def swap_nibbles(b: int) -> int:
    return ((b & 0x0F) << 4) | (b >> 4)


def rbit(num: int) -> int:
    """Reverse the bit order of one byte."""
    out = 0
    for i in range(8):
        out = (out << 1) | ((num >> i) & 1)
    return out


class Gorgon:
    def __init__(self, unix: int, params: str, data: str | bytes = "", cookies: str = ""):
        self.unix = int(unix)
        self.params = params
        self.data = data
        self.cookies = cookies

    def get_base_string(self) -> str:
        base = md5_hex(self.params)
        base += md5_hex(self.data) if self.data else EMPTY_MD5
        base += md5_hex(self.cookies) if self.cookies else EMPTY_MD5
        return base

    def encrypt(self, base: str) -> Dict[str, str]:
        # 4 bytes from each of the three digests
        param_list = bytearray()
        for i in range(0, 12, 4):
            param_list += bytes.fromhex(base[8 * i:8 * (i + 1)])
        param_list += CONSTANT_BYTES
        param_list += (self.unix & 0xFFFFFFFF).to_bytes(4, "big")

        eor = bytearray(a ^ b for a, b in zip(param_list, KEY))
        # in place: position i reads the already-updated neighbour for i == LENGTH - 1
        for i in range(LENGTH):
            e = swap_nibbles(eor[i]) ^ eor[(i + 1) % LENGTH]
            eor[i] = (~rbit(e) ^ LENGTH) & 0xFF

        signing_logger.debug(f"gorgon base {base[:72]} -> {eor.hex()}")
        return {
            "x-ss-req-ticket": str(self.unix * 1000),
            "x-khronos": str(self.unix),
            "x-gorgon": VERSION_PREFIX + eor.hex(),
        }

    def get_value(self) -> Dict[str, str]:
        return self.encrypt(self.get_base_string())
