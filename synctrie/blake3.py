"""A self-contained BLAKE3 hash with extendable output."""

import struct

_MASK = 0xFFFFFFFF
_BLOCK_LEN = 64
_CHUNK_LEN = 1024

_CHUNK_START = 1 << 0
_CHUNK_END = 1 << 1
_PARENT = 1 << 2
_ROOT = 1 << 3

_IV = (
    0x6A09E667,
    0xBB67AE85,
    0x3C6EF372,
    0xA54FF53A,
    0x510E527F,
    0x9B05688C,
    0x1F83D9AB,
    0x5BE0CD19,
)

_PERMUTATION = (2, 6, 3, 10, 7, 0, 4, 13, 1, 11, 12, 5, 9, 14, 15, 8)


def _rotr(x, n):
    return ((x >> n) | (x << (32 - n))) & _MASK


def _g(s, a, b, c, d, mx, my):
    s[a] = (s[a] + s[b] + mx) & _MASK
    s[d] = _rotr(s[d] ^ s[a], 16)
    s[c] = (s[c] + s[d]) & _MASK
    s[b] = _rotr(s[b] ^ s[c], 12)
    s[a] = (s[a] + s[b] + my) & _MASK
    s[d] = _rotr(s[d] ^ s[a], 8)
    s[c] = (s[c] + s[d]) & _MASK
    s[b] = _rotr(s[b] ^ s[c], 7)


def _round(s, m):
    _g(s, 0, 4, 8, 12, m[0], m[1])
    _g(s, 1, 5, 9, 13, m[2], m[3])
    _g(s, 2, 6, 10, 14, m[4], m[5])
    _g(s, 3, 7, 11, 15, m[6], m[7])
    _g(s, 0, 5, 10, 15, m[8], m[9])
    _g(s, 1, 6, 11, 12, m[10], m[11])
    _g(s, 2, 7, 8, 13, m[12], m[13])
    _g(s, 3, 4, 9, 14, m[14], m[15])


def _compress(cv, block_words, counter, block_len, flags):
    state = [
        *cv,
        *_IV[:4],
        counter & _MASK,
        (counter >> 32) & _MASK,
        block_len,
        flags,
    ]
    msg = list(block_words)
    for round_no in range(7):
        _round(state, msg)
        if round_no < 6:
            msg = [msg[i] for i in _PERMUTATION]
    low, high = state[:8], state[8:]
    return [a ^ b for a, b in zip(low, high)] + [b ^ c for b, c in zip(high, cv)]


def _words(block):
    return struct.unpack("<16I", bytes(block).ljust(_BLOCK_LEN, b"\0"))


class _Output:
    __slots__ = ("input_cv", "block_words", "counter", "block_len", "flags")

    def __init__(self, input_cv, block_words, counter, block_len, flags):
        self.input_cv = input_cv
        self.block_words = block_words
        self.counter = counter
        self.block_len = block_len
        self.flags = flags

    def chaining_value(self):
        words = _compress(
            self.input_cv, self.block_words, self.counter, self.block_len, self.flags
        )
        return tuple(words[:8])

    def root_bytes(self, length):
        out = bytearray()
        counter = 0
        while len(out) < length:
            words = _compress(
                self.input_cv,
                self.block_words,
                counter,
                self.block_len,
                self.flags | _ROOT,
            )
            out += struct.pack("<16I", *words)
            counter += 1
        return bytes(out[:length])


class _ChunkState:
    def __init__(self, key, counter, flags):
        self.cv = key
        self.counter = counter
        self.flags = flags
        self.block = bytearray()
        self.blocks_compressed = 0

    def __len__(self):
        return _BLOCK_LEN * self.blocks_compressed + len(self.block)

    def _start_flag(self):
        return _CHUNK_START if self.blocks_compressed == 0 else 0

    def update(self, data):
        while data:
            if len(self.block) == _BLOCK_LEN:
                words = _compress(
                    self.cv,
                    _words(self.block),
                    self.counter,
                    _BLOCK_LEN,
                    self.flags | self._start_flag(),
                )
                self.cv = tuple(words[:8])
                self.blocks_compressed += 1
                self.block.clear()
            take = _BLOCK_LEN - len(self.block)
            self.block += data[:take]
            data = data[take:]

    def output(self):
        return _Output(
            self.cv,
            _words(self.block),
            self.counter,
            len(self.block),
            self.flags | self._start_flag() | _CHUNK_END,
        )


class Blake3:
    """Incremental BLAKE3 hasher; digests of any length can be taken at any time."""

    def __init__(self, data=b""):
        self._key = _IV
        self._chunk = _ChunkState(self._key, 0, 0)
        self._cv_stack = []
        if data:
            self.update(data)

    def _parent_output(self, left, right):
        return _Output(self._key, left + right, 0, _BLOCK_LEN, _PARENT)

    def _push_chunk_cv(self, cv, total_chunks):
        while total_chunks & 1 == 0:
            cv = self._parent_output(self._cv_stack.pop(), cv).chaining_value()
            total_chunks >>= 1
        self._cv_stack.append(cv)

    def update(self, data):
        """Feed more input; returns the hasher so calls can be chained."""
        view = memoryview(bytes(data))
        while view:
            if len(self._chunk) == _CHUNK_LEN:
                chunk_cv = self._chunk.output().chaining_value()
                total_chunks = self._chunk.counter + 1
                self._push_chunk_cv(chunk_cv, total_chunks)
                self._chunk = _ChunkState(self._key, total_chunks, 0)
            take = _CHUNK_LEN - len(self._chunk)
            self._chunk.update(view[:take])
            view = view[take:]
        return self

    def digest(self, length=32):
        """Return ``length`` bytes of output without altering the hasher state."""
        if length < 0:
            raise ValueError("digest length must not be negative")
        output = self._chunk.output()
        for left in reversed(self._cv_stack):
            output = self._parent_output(left, output.chaining_value())
        return output.root_bytes(length)

    def hexdigest(self, length=32):
        return self.digest(length).hex()


def blake3(data, length=32):
    """Hash ``data`` in one call and return ``length`` bytes."""
    return Blake3(data).digest(length)