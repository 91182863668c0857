import pytest

from codec import ProtoBuf, ProtoField, ProtoFieldType, ProtoReader, ProtoWriter
from errors import MalformedField, UnsupportedFieldType


def varint(v):
    w = ProtoWriter()
    w.write_varint(v)
    return w.to_bytes()


def test_reference_encoding():
    pb = ProtoBuf()
    pb.put_varint(1, 0)
    pb.put_varint(2, 0xFFFFFFFF)
    pb.put_varint(3, 0x1FFFFFFFF)
    pb.put_varint(4, 128)
    pb.put_utf8(5, "none")
    pb.put_int32(6, 0x01020304)
    pb.put_int64(7, 0x0102030405060708)
    assert pb.to_bytes().hex() == (
        "0800" "10ffffffff0f" "18ffffffff0f" "2000" "2a046e6f6e65"
        "3504030201" "390807060504030201"
    )


def test_varint_boundaries():
    assert varint(0) == b"\x00"
    assert varint(0xFFFFFFFF) == b"\xff\xff\xff\xff\x0f"
    assert varint(300) == b"\xac\x02"
    # values past 32 bits are truncated, not rejected
    assert varint(2 ** 32) == b"\x00"
    assert varint(2 ** 32 + 5) == b"\x05"


def test_varint_exact_0x80_collapses():
    # the writer loops on v > 0x80; the verifier expects these bytes
    assert varint(0x80) == b"\x00"
    assert varint(0x81) == b"\x81\x01"
    assert varint(0x80 << 7) == b"\x80\x00"


def test_round_trip_all_types():
    pb = ProtoBuf()
    pb.put_varint(1, 0x40401252)
    pb.put_varint(2, 2)
    pb.put_utf8(4, "1233")
    pb.put_bytes(10, bytes(8))
    pb.put_bytes(13, bytes.fromhex("9c840df1aec0"))
    pb.put_int32(17, 0xDEADBEEF)
    pb.put_int64(18, 0xFFFFFFFFFFFFFFFF)
    pb.put_utf8(20, "none")
    pb.put_varint(21, 738)

    decoded = ProtoBuf(pb.to_bytes())
    assert decoded.fields == pb.fields
    assert decoded.get_int(17) == 0xDEADBEEF
    assert decoded.get_utf8(4) == "1233"


def test_nested_message_round_trip():
    inner = ProtoBuf()
    inner.put_varint(1, 7)
    inner.put_utf8(2, "sub")
    outer = ProtoBuf()
    outer.put_bytes(3, inner.to_bytes())

    decoded = ProtoBuf(ProtoBuf(outer.to_bytes()).get_bytes(3))
    assert decoded.fields == inner.fields


def test_index_zero_terminates():
    pb = ProtoBuf(b"\x08\x01\x00\x10\x02")
    assert [f.idx for f in pb] == [1]


@pytest.mark.parametrize("data", [
    b"\x0b",              # GROUPSTART
    b"\x0c",              # GROUPEND
    b"\x0e\x00",          # ERROR1
    b"\x0a\x05ab",        # declared length past the end
    b"\x0d\x01\x02",      # truncated INT32
    b"\x08\x80",          # unterminated varint
])
def test_malformed_input(data):
    with pytest.raises(MalformedField):
        ProtoBuf(data)


def test_encoding_unsupported_type():
    pb = ProtoBuf()
    pb.put(ProtoField(1, ProtoFieldType.GROUPSTART))
    with pytest.raises(UnsupportedFieldType):
        pb.to_bytes()


def test_getters():
    pb = ProtoBuf()
    pb.put_varint(1, 5)
    pb.put_utf8(2, "x")
    assert pb.get_int(9) == 0
    assert pb.get_bytes(9) is None
    assert pb.get_utf8(9) is None
    with pytest.raises(MalformedField):
        pb.get_bytes(1)
    with pytest.raises(MalformedField):
        pb.get_int(2)


def test_field_str():
    assert str(ProtoField(5, ProtoFieldType.STRING, bytes_value=b"none")) == '5(STRING): "none"'
    assert str(ProtoField(10, ProtoFieldType.STRING, bytes_value=b"\x00\x01")) == '10(STRING): h"0001"'
    assert str(ProtoField(21, ProtoFieldType.VARINT, int_value=738)) == "21(VARINT): 738"


def test_reader_primitives():
    r = ProtoReader(b"\x04\x03\x02\x01\xac\x02")
    assert r.read_int32() == 0x01020304
    assert r.read_varint() == 300
    assert not r.remain(1)
