import struct
from typing import Any

import msgpack
from msgpack.exceptions import UnpackException

from tablekv.core.errors import CodecError, InvalidArgument
from tablekv.core.ports.codec import Codec


class OrderedCodec(Codec):
    """
    Order-preserving key encoding and msgpack value encoding.

    A key is a tuple of components. Scalars are promoted to one-element
    tuples. Each component is written as a type tag followed by a payload
    whose byte order matches the component order:

        None < False < True < negative int < 0 < positive int
             < float < bytes < str

    bytes and str payloads are zero-terminated, with embedded 0x00 escaped
    as 0x00 0xFF and embedded 0xFF escaped as 0xFF 0x00, so an unterminated
    payload followed by 0xFF 0xFF sorts above all of its continuations.
    Numbers use fixed-width big-endian payloads. The whole key ends with a
    0x00 terminator, which sorts a key before the keys nested under it and
    gives every key an exact predecessor bound.

    No tag uses 0xFF, so b"\\xff" is greater than every encoded key.
    """
    TAG_NONE = 0x01
    TAG_FALSE = 0x02
    TAG_TRUE = 0x03
    TAG_INT_NEG = 0x04
    TAG_INT_ZERO = 0x05
    TAG_INT_POS = 0x06
    TAG_FLOAT = 0x07
    TAG_BYTES = 0x08
    TAG_STR = 0x09

    TERMINATOR = b"\x00"
    ESCAPE = b"\x00\xff"
    ESCAPE_MAX = b"\xff\x00"
    MAX_BYTE = b"\xff"

    INT_MIN = -(1 << 63)
    INT_MAX = (1 << 63) - 1

    def normalize_key(self, key: Any) -> tuple:
        if isinstance(key, list):
            key = tuple(key)
        elif not isinstance(key, tuple):
            key = (key,)

        if not key:
            raise InvalidArgument("invalid key: empty key")

        for component in key:
            if component is not None and not isinstance(
                component, (bool, int, float, str, bytes)
            ):
                raise InvalidArgument(
                    f"invalid key component {component!r} "
                    f"(unsupported type {type(component).__name__})"
                )

        return key

    def encode_key(self, key: Any) -> bytes:
        return self._encode_components(key) + self.TERMINATOR

    def decode_key(self, data: bytes) -> tuple:
        components = []
        pos = 0

        try:
            while data[pos] != 0x00:
                component, pos = self._read_component(data, pos)
                components.append(component)
        except (IndexError, struct.error, UnicodeDecodeError) as ex:
            raise CodecError(f"malformed key {data!r}: {ex}") from ex

        if pos != len(data) - 1 or not components:
            raise CodecError(f"malformed key {data!r}: unexpected trailing data")

        return tuple(components)

    def encode_value(self, value: Any) -> bytes:
        try:
            return msgpack.packb(value, use_bin_type=True)
        except (TypeError, ValueError, OverflowError) as ex:
            raise CodecError(
                f"cannot encode value of type {type(value).__name__}: {ex}"
            ) from ex

    def decode_value(self, data: bytes) -> Any:
        try:
            return msgpack.unpackb(data, raw=False)
        except (UnpackException, ValueError, TypeError) as ex:
            raise CodecError(f"malformed value: {ex}") from ex

    def min_key(self) -> bytes:
        return b""

    def max_key(self) -> bytes:
        return self.MAX_BYTE

    def prefix_bounds(self, prefix: Any) -> tuple[bytes, bytes]:
        """
        Leading components must be equal. The last component, when it is
        str or bytes, matches by text prefix: ("x",) matches "x1" and
        ("x2", 3), ("users", "al") matches ("users", "alice").
        """
        *head, last = prefix
        low = self._encode_components(head)
        if self._is_text(last):
            low += self._write_text(last, terminated=False)
            return low, low + self.MAX_BYTE * 2

        low += self._write_component(last)
        return low, low + self.MAX_BYTE

    def key_after(self, key: Any) -> bytes:
        return self.encode_key(key) + b"\x00"

    def key_before(self, key: Any) -> bytes:
        # the greatest byte string below X||0x00 is X itself
        return self._encode_components(key)

    def subtree_end(self, key: Any) -> bytes:
        return self._encode_components(key) + self.MAX_BYTE

    @staticmethod
    def _is_text(value: Any) -> bool:
        return isinstance(value, (str, bytes))

    def _encode_components(self, key: tuple | list) -> bytes:
        return b"".join(self._write_component(c) for c in key)

    def _write_component(self, value: Any) -> bytes:
        if value is None:
            return bytes([self.TAG_NONE])
        if isinstance(value, bool):
            return bytes([self.TAG_TRUE if value else self.TAG_FALSE])
        if isinstance(value, int):
            if not self.INT_MIN <= value <= self.INT_MAX:
                raise CodecError(f"integer out of 64-bit range: {value}")
            if value == 0:
                return bytes([self.TAG_INT_ZERO])
            if value > 0:
                return bytes([self.TAG_INT_POS]) + struct.pack(">Q", value)
            return bytes([self.TAG_INT_NEG]) + struct.pack(">Q", (1 << 64) + value)
        if isinstance(value, float):
            bits = struct.pack(">d", value)
            if bits[0] & 0x80:
                bits = bytes(b ^ 0xFF for b in bits)
            else:
                bits = bytes([bits[0] ^ 0x80]) + bits[1:]
            return bytes([self.TAG_FLOAT]) + bits
        if isinstance(value, (str, bytes)):
            return self._write_text(value, terminated=True)

        raise CodecError(f"unsupported key component type: {type(value).__name__}")

    def _write_text(self, value: str | bytes, terminated: bool) -> bytes:
        if isinstance(value, str):
            tag, payload = self.TAG_STR, value.encode("utf-8")
        elif isinstance(value, bytes):
            tag, payload = self.TAG_BYTES, value
        else:
            raise CodecError(f"unsupported prefix type: {type(value).__name__}")

        out = bytes([tag]) + self._escape(payload)
        return out + self.TERMINATOR if terminated else out

    def _escape(self, payload: bytes) -> bytes:
        if b"\x00" not in payload and b"\xff" not in payload:
            return payload

        out = bytearray()
        for byte in payload:
            if byte == 0x00:
                out += self.ESCAPE
            elif byte == 0xFF:
                out += self.ESCAPE_MAX
            else:
                out.append(byte)
        return bytes(out)

    def _read_component(self, data: bytes, pos: int) -> tuple[Any, int]:
        tag = data[pos]
        pos += 1

        if tag == self.TAG_NONE:
            return None, pos
        if tag == self.TAG_FALSE:
            return False, pos
        if tag == self.TAG_TRUE:
            return True, pos
        if tag == self.TAG_INT_ZERO:
            return 0, pos
        if tag == self.TAG_INT_POS:
            (value,) = struct.unpack(">Q", data[pos:pos + 8])
            return value, pos + 8
        if tag == self.TAG_INT_NEG:
            (value,) = struct.unpack(">Q", data[pos:pos + 8])
            return value - (1 << 64), pos + 8
        if tag == self.TAG_FLOAT:
            bits = bytearray(data[pos:pos + 8])
            if len(bits) != 8:
                raise struct.error("truncated float")
            if bits[0] & 0x80:
                bits[0] ^= 0x80
            else:
                bits = bytearray(b ^ 0xFF for b in bits)
            (value,) = struct.unpack(">d", bytes(bits))
            return value, pos + 8
        if tag in (self.TAG_BYTES, self.TAG_STR):
            payload, pos = self._read_text(data, pos)
            if tag == self.TAG_STR:
                return payload.decode("utf-8"), pos
            return payload, pos

        raise CodecError(f"unknown type tag 0x{tag:02x} at offset {pos - 1}")

    @staticmethod
    def _read_text(data: bytes, pos: int) -> tuple[bytes, int]:
        out = bytearray()
        while True:
            byte = data[pos]
            if byte == 0x00:
                if pos + 1 < len(data) and data[pos + 1] == 0xFF:
                    out.append(0x00)
                    pos += 2
                    continue
                return bytes(out), pos + 1
            if byte == 0xFF:
                if data[pos + 1] != 0x00:
                    raise CodecError(f"unescaped 0xff at offset {pos}")
                out.append(0xFF)
                pos += 2
                continue
            out.append(byte)
            pos += 1
