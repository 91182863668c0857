import pytest

from sm3 import SM3, pad, sm3_hash

# reference digests (GB/T 32905 test vectors, cross-checked with openssl dgst -sm3)
VECTORS = [
    (b"", "1ab21d8355cfa17f8e61194831e81a8f22bec8c728fefb747ed035eb5082aa2b"),
    (bytes(16), "106e34a2b8c7bb13156cfdd0d91379dcc47543dcf9787c68ae5eb582620ae6e8"),
    (b"abc", "66c7f0f462eeedd9d1f2d46bdc10e4e24167c4875cf2f7a2297da02b8f4ba8e0"),
    (b"abcd" * 16, "debe9ff92275b8a138604889c18e5a4d6fdb70e5387e5765293dcba39c0c5732"),
    (bytes(56), "87b81af2b2b22cbdf268e211d012d604892d3c948ff298d61d6c942eee847f86"),
    (b"device_id=123456789", "d6d69d64f16d86e94995a53d3f09f552a783cc50ef3f2a179fc1c16ab26aa7b4"),
]


@pytest.mark.parametrize("msg,expected", VECTORS)
def test_known_vectors(msg, expected):
    assert sm3_hash(msg).hex() == expected


@pytest.mark.parametrize("n", [0, 1, 55, 56, 63, 64, 65, 200])
def test_digest_is_32_bytes_and_padding_is_block_aligned(n):
    assert len(sm3_hash(b"x" * n)) == 32
    padded = pad(b"x" * n)
    assert len(padded) % 64 == 0 and len(padded) > n
    assert padded[n] == 0x80
    assert int.from_bytes(padded[-8:], "big") == n * 8


def test_object_wrapper_matches_function():
    h = SM3()
    assert h.hash(b"abc") == sm3_hash(b"abc")
    assert h.hexdigest(b"abc") == VECTORS[2][1]
    # no state carried between calls
    assert h.hash(b"abc") == h.hash(b"abc")
