"""Standard primitives: MD5, AES-128-CBC, PKCS#7 and base64 helpers."""
from __future__ import annotations
import base64, hashlib
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.backends import default_backend

BLOCK_SIZE = 16

def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")

def b64_decode(s: str) -> bytes:
    return base64.b64decode(s, validate=True)

def md5_bytes(data: bytes) -> bytes:
    return hashlib.md5(data).digest()

def md5_hex(data: bytes | str) -> str:
    """Lower-case hex MD5; str input is UTF-8 encoded."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.md5(data).hexdigest()

def pkcs7_pad(data: bytes, block_size: int = BLOCK_SIZE) -> bytes:
    """Always adds 1..block_size bytes, a full block when already aligned."""
    padder = padding.PKCS7(block_size * 8).padder()
    return padder.update(data) + padder.finalize()

def pkcs7_unpad(data: bytes, block_size: int = BLOCK_SIZE) -> bytes:
    unpadder = padding.PKCS7(block_size * 8).unpadder()
    return unpadder.update(data) + unpadder.finalize()

def aes_cbc_encrypt(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    """AES-CBC over the PKCS#7-padded plaintext."""
    enc = Cipher(algorithms.AES(key), modes.CBC(iv), backend=default_backend()).encryptor()
    return enc.update(pkcs7_pad(plaintext)) + enc.finalize()

def aes_cbc_decrypt(key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    dec = Cipher(algorithms.AES(key), modes.CBC(iv), backend=default_backend()).decryptor()
    return pkcs7_unpad(dec.update(ciphertext) + dec.finalize())
