"""Wire format of persisted trie nodes and their database keys."""

from dataclasses import dataclass, field

from .errors import HubError

# Root key prefix under which sync trie nodes are stored.
SYNC_MERKLE_TRIE_NODE_PREFIX = 15

_FIELD_KEY = 1
_FIELD_CHILD_CHARS = 2
_FIELD_ITEMS = 3
_FIELD_HASH = 4

_WIRE_VARINT = 0
_WIRE_FIXED64 = 1
_WIRE_LEN = 2
_WIRE_FIXED32 = 5

_UINT32 = 0xFFFFFFFF


def make_primary_key(prefix, child_char=None):
    """Database key for the node at ``prefix`` (or its child at ``child_char``)."""
    key = bytearray([SYNC_MERKLE_TRIE_NODE_PREFIX])
    key += bytes(prefix)
    if child_char is not None:
        key.append(child_char)
    return bytes(key)


def _encode_varint(value):
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _decode_error(reason):
    return HubError(
        "bad_request.invalid_param", f"Failed to decode trie node: {reason}"
    )


class _Reader:
    def __init__(self, data):
        self.data = data
        self.pos = 0

    def at_end(self):
        return self.pos >= len(self.data)

    def varint(self):
        result = 0
        for shift in range(0, 70, 7):
            if self.pos >= len(self.data):
                raise _decode_error("buffer underflow")
            byte = self.data[self.pos]
            self.pos += 1
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return result & 0xFFFFFFFFFFFFFFFF
        raise _decode_error("invalid varint")

    def take(self, length):
        end = self.pos + length
        if end > len(self.data):
            raise _decode_error("buffer underflow")
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def skip(self, wire_type):
        if wire_type == _WIRE_VARINT:
            self.varint()
        elif wire_type == _WIRE_FIXED64:
            self.take(8)
        elif wire_type == _WIRE_LEN:
            self.take(self.varint())
        elif wire_type == _WIRE_FIXED32:
            self.take(4)
        else:
            raise _decode_error(f"invalid wire type value: {wire_type}")


@dataclass
class DbTrieNode:
    """Persisted form of a trie node."""

    key: bytes = b""
    child_chars: list = field(default_factory=list)
    items: int = 0
    hash: bytes = b""

    def encode(self):
        out = bytearray()
        if self.key:
            out += _encode_varint(_FIELD_KEY << 3 | _WIRE_LEN)
            out += _encode_varint(len(self.key)) + bytes(self.key)
        if self.child_chars:
            packed = b"".join(_encode_varint(c & _UINT32) for c in self.child_chars)
            out += _encode_varint(_FIELD_CHILD_CHARS << 3 | _WIRE_LEN)
            out += _encode_varint(len(packed)) + packed
        if self.items:
            out += _encode_varint(_FIELD_ITEMS << 3 | _WIRE_VARINT)
            out += _encode_varint(self.items & _UINT32)
        if self.hash:
            out += _encode_varint(_FIELD_HASH << 3 | _WIRE_LEN)
            out += _encode_varint(len(self.hash)) + bytes(self.hash)
        return bytes(out)

    @staticmethod
    def decode(data):
        reader = _Reader(bytes(data))
        node = DbTrieNode()
        while not reader.at_end():
            tag = reader.varint()
            field_no, wire_type = tag >> 3, tag & 7
            if field_no == 0:
                raise _decode_error("invalid tag value: 0")
            if field_no in (_FIELD_KEY, _FIELD_HASH):
                if wire_type != _WIRE_LEN:
                    raise _decode_error(f"invalid wire type for field {field_no}")
                value = reader.take(reader.varint())
                if field_no == _FIELD_KEY:
                    node.key = value
                else:
                    node.hash = value
            elif field_no == _FIELD_CHILD_CHARS:
                if wire_type == _WIRE_LEN:
                    packed = _Reader(reader.take(reader.varint()))
                    while not packed.at_end():
                        node.child_chars.append(packed.varint() & _UINT32)
                elif wire_type == _WIRE_VARINT:
                    node.child_chars.append(reader.varint() & _UINT32)
                else:
                    raise _decode_error(f"invalid wire type for field {field_no}")
            elif field_no == _FIELD_ITEMS:
                if wire_type != _WIRE_VARINT:
                    raise _decode_error(f"invalid wire type for field {field_no}")
                node.items = reader.varint() & _UINT32
            else:
                reader.skip(wire_type)
        return node