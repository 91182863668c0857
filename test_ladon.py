import base64
import os

import pytest

import ladon
from errors import RandomSourceFailure


def test_matches_reference():
    out = ladon.ladon_encrypt(1700000000, 1611921764, 1233, random_bytes=b"\x01\x02\x03\x04")
    assert out == "AQIDBDVFfP9USKdZmCmktvwqxsZDhD8hxvfmokrn6O+AmKsJ"


def test_random_prefix_and_length():
    raw = base64.b64decode(ladon.ladon_encrypt(1700000000, 1611921764, 1233))
    # 4-byte nonce + "1700000000-1611921764-1233" (26 bytes) padded to 32
    assert len(raw) == 36


def test_nonce_changes_output():
    a = ladon.ladon_encrypt(1, 2, 3, random_bytes=b"aaaa")
    b = ladon.ladon_encrypt(1, 2, 3, random_bytes=b"bbbb")
    assert a != b
    assert base64.b64decode(a)[:4] == b"aaaa"


@pytest.mark.parametrize("size,expected", [(1, 16), (15, 16), (17, 32), (26, 32)])
def test_pad_input(size, expected):
    padded = ladon.pad_input(b"x" * size)
    assert len(padded) == expected
    assert padded[-1] == expected - size


def test_aligned_input_is_left_unpadded():
    assert ladon.pad_input(b"x" * 16) == b"x" * 16
    assert ladon.pad_input(b"") == b""


def test_hash_table_layout():
    table = ladon.build_hash_table(b"0123456789abcdef0123456789abcdef")
    assert len(table) == ladon.TABLE_SIZE
    assert table[:8] == b"01234567"
    assert table[8:16] != b"89abcdef"


def test_random_source_failure(monkeypatch):
    def broken(n):
        raise NotImplementedError("no entropy")
    monkeypatch.setattr(os, "urandom", broken)
    with pytest.raises(RandomSourceFailure):
        ladon.ladon_encrypt(1700000000, 1611921764, 1233)
