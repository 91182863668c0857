"""Tagged-field binary codec (protobuf wire subset) used to build the X-Argus payload."""
from __future__ import annotations
import enum, struct, logging
from typing import List, Optional

from errors import MalformedField, UnsupportedFieldType

signing_logger = logging.getLogger('signing')


class ProtoFieldType(enum.IntEnum):
    VARINT = 0
    INT64 = 1
    STRING = 2
    GROUPSTART = 3
    GROUPEND = 4
    INT32 = 5
    ERROR1 = 6
    ERROR2 = 7

    def __str__(self):
        return self.name


INT_TYPES = (ProtoFieldType.VARINT, ProtoFieldType.INT64, ProtoFieldType.INT32)


class ProtoField:
    def __init__(self, idx: int, ftype: ProtoFieldType, int_value: int = 0, bytes_value: bytes = b""):
        self.idx = idx
        self.type = ProtoFieldType(ftype)
        self.int_value = int_value
        self.bytes_value = bytes_value

    def is_ascii(self) -> bool:
        return all(0x20 <= b <= 0x7e for b in self.bytes_value)

    def __eq__(self, other):
        if not isinstance(other, ProtoField):
            return NotImplemented
        return (self.idx, self.type, self.int_value, bytes(self.bytes_value)) == \
               (other.idx, other.type, other.int_value, bytes(other.bytes_value))

    def __repr__(self):
        return f"ProtoField({self})"

    def __str__(self):
        if self.type in INT_TYPES:
            return f"{self.idx}({self.type}): {self.int_value}"
        if self.type == ProtoFieldType.STRING:
            if self.is_ascii():
                return f'{self.idx}({self.type}): "{self.bytes_value.decode("ascii")}"'
            return f'{self.idx}({self.type}): h"{self.bytes_value.hex()}"'
        return f"{self.idx}({self.type}): {self.int_value}"


class ProtoReader:
    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.pos = 0

    def remain(self, n: int) -> bool:
        return self.pos + n <= len(self.data)

    def read(self, n: int) -> bytes:
        if not self.remain(n):
            raise MalformedField(f"truncated input: need {n} bytes at offset {self.pos}, have {len(self.data) - self.pos}")
        out = self.data[self.pos:self.pos + n]
        self.pos += n
        return out

    def read_byte(self) -> int:
        return self.read(1)[0]

    def read_int32(self) -> int:
        return struct.unpack("<I", self.read(4))[0]

    def read_int64(self) -> int:
        return struct.unpack("<Q", self.read(8))[0]

    def read_varint(self) -> int:
        value = 0
        shift = 0
        while True:
            b = self.read_byte()
            value |= (b & 0x7F) << shift
            if b < 0x80:
                return value
            shift += 7

    def read_string(self) -> bytes:
        return self.read(self.read_varint())


class ProtoWriter:
    def __init__(self):
        self.data = bytearray()

    def write(self, b: bytes) -> None:
        self.data += b

    def write_byte(self, b: int) -> None:
        self.data.append(b & 0xFF)

    def write_int32(self, v: int) -> None:
        self.write(struct.pack("<I", v & 0xFFFFFFFF))

    def write_int64(self, v: int) -> None:
        self.write(struct.pack("<Q", v & 0xFFFFFFFFFFFFFFFF))

    def write_varint(self, v: int) -> None:
        # 32-bit truncation and the strict > 0x80 loop test are part of the wire format
        v &= 0xFFFFFFFF
        while v > 0x80:
            self.write_byte((v & 0x7F) | 0x80)
            v >>= 7
        self.write_byte(v & 0x7F)

    def write_string(self, b: bytes) -> None:
        self.write_varint(len(b))
        self.write(b)

    def to_bytes(self) -> bytes:
        return bytes(self.data)


class ProtoBuf:
    """Ordered field list; insertion order is serialization order."""

    def __init__(self, data: Optional[bytes] = None):
        self.fields: List[ProtoField] = []
        if data:
            self._parse(data)

    def _parse(self, data: bytes) -> None:
        reader = ProtoReader(data)
        while reader.remain(1):
            key = reader.read_varint()
            idx = key >> 3
            if idx == 0:
                break
            ftype = key & 7
            if ftype == ProtoFieldType.INT32:
                self.put(ProtoField(idx, ftype, int_value=reader.read_int32()))
            elif ftype == ProtoFieldType.INT64:
                self.put(ProtoField(idx, ftype, int_value=reader.read_int64()))
            elif ftype == ProtoFieldType.VARINT:
                self.put(ProtoField(idx, ftype, int_value=reader.read_varint()))
            elif ftype == ProtoFieldType.STRING:
                self.put(ProtoField(idx, ftype, bytes_value=reader.read_string()))
            else:
                raise MalformedField(f"unexpected field type {ProtoFieldType(ftype)} for index {idx}")
            signing_logger.debug(f"parsed field {self.fields[-1]}")

    def to_bytes(self) -> bytes:
        writer = ProtoWriter()
        for field in self.fields:
            if field.type not in (ProtoFieldType.VARINT, ProtoFieldType.INT64,
                                  ProtoFieldType.STRING, ProtoFieldType.INT32):
                raise UnsupportedFieldType(f"cannot encode field {field.idx} of type {field.type}")
            writer.write_varint((field.idx << 3) | field.type)
            if field.type == ProtoFieldType.INT32:
                writer.write_int32(field.int_value)
            elif field.type == ProtoFieldType.INT64:
                writer.write_int64(field.int_value)
            elif field.type == ProtoFieldType.VARINT:
                writer.write_varint(field.int_value)
            else:
                writer.write_string(field.bytes_value)
        return writer.to_bytes()

    def dump(self) -> str:
        return "\n".join(str(f) for f in self.fields)

    def __len__(self):
        return len(self.fields)

    def __iter__(self):
        return iter(self.fields)

    def put(self, field: ProtoField) -> None:
        self.fields.append(field)

    def get(self, idx: int) -> Optional[ProtoField]:
        for field in self.fields:
            if field.idx == idx:
                return field
        return None

    def get_int(self, idx: int) -> int:
        field = self.get(idx)
        if field is None:
            return 0
        if field.type not in INT_TYPES:
            raise MalformedField(f"field {idx} is not an integer")
        return field.int_value

    def get_bytes(self, idx: int) -> Optional[bytes]:
        field = self.get(idx)
        if field is None:
            return None
        if field.type != ProtoFieldType.STRING:
            raise MalformedField(f"field {idx} is not a string")
        return field.bytes_value

    def get_utf8(self, idx: int) -> Optional[str]:
        value = self.get_bytes(idx)
        return None if value is None else value.decode("utf-8")

    # --- typed setters ---------------------------------------------------

    def put_int32(self, idx: int, v: int) -> None:
        self.put(ProtoField(idx, ProtoFieldType.INT32, int_value=v))

    def put_int64(self, idx: int, v: int) -> None:
        self.put(ProtoField(idx, ProtoFieldType.INT64, int_value=v))

    def put_varint(self, idx: int, v: int) -> None:
        self.put(ProtoField(idx, ProtoFieldType.VARINT, int_value=v))

    def put_bytes(self, idx: int, b: bytes) -> None:
        self.put(ProtoField(idx, ProtoFieldType.STRING, bytes_value=bytes(b)))

    def put_utf8(self, idx: int, s: str) -> None:
        self.put(ProtoField(idx, ProtoFieldType.STRING, bytes_value=s.encode("utf-8")))
