import pytest
from hypothesis import assume, given
from hypothesis import strategies as st

from synctrie.blake3 import blake3
from synctrie.errors import HubError
from synctrie.util import (
    blake3_20,
    bytes_compare,
    decrement_bytes,
    increment_bytes,
    to_ts_hash,
)


def test_bytes_compare():
    assert bytes_compare(bytes([0, 0, 0]), bytes([0, 0, 0])) == 0
    assert bytes_compare(bytes([0, 0, 0]), bytes([0, 0, 1])) == -1
    assert bytes_compare(bytes([0, 0, 1]), bytes([0, 0, 0])) == 1


def test_bytes_compare_prefix_is_smaller():
    assert bytes_compare(bytes([1, 2]), bytes([1, 2, 0])) == -1
    assert bytes_compare(bytes([1, 2, 0]), bytes([1, 2])) == 1


@given(st.binary(max_size=8), st.binary(max_size=8))
def test_bytes_compare_is_antisymmetric(a, b):
    assert bytes_compare(a, b) == -bytes_compare(b, a)
    assert (bytes_compare(a, b) == 0) == (a == b)


@pytest.mark.parametrize(
    "value, expected",
    [
        ([0, 0, 0], [0, 0, 1]),
        ([0, 0, 255], [0, 1, 0]),
        ([0, 255, 255], [1, 0, 0]),
        ([255, 255, 255], [1, 0, 0, 0]),
    ],
)
def test_increment(value, expected):
    assert increment_bytes(bytes(value)) == bytes(expected)


@pytest.mark.parametrize(
    "value, expected",
    [
        ([0, 0, 1], [0, 0, 0]),
        ([0, 1, 0], [0, 0, 255]),
        ([1, 0, 0], [0, 255, 255]),
        ([1, 0, 0, 0], [0, 255, 255, 255]),
    ],
)
def test_decrement(value, expected):
    assert decrement_bytes(bytes(value)) == bytes(expected)


def test_decrement_all_zero_underflows():
    assert decrement_bytes(bytes([0, 0])) == bytes([255])


@given(st.binary(min_size=1, max_size=10))
def test_decrement_undoes_increment(value):
    assume(any(byte != 255 for byte in value))
    assert decrement_bytes(increment_bytes(value)) == value


@given(st.binary(min_size=1, max_size=10))
def test_increment_undoes_decrement(value):
    assume(any(byte != 0 for byte in value))
    assert increment_bytes(decrement_bytes(value)) == value


def test_blake3_20_of_empty():
    assert blake3_20(b"") == bytes.fromhex("af1349b9f5f9a1a6a0404dea36dcc9499bcb25c9")


def test_blake3_20_is_prefix_of_full_hash():
    digest = blake3_20(b"trie node")
    assert len(digest) == 20
    assert blake3(b"trie node").startswith(digest)


def test_to_ts_hash_accepts_24_bytes():
    value = list(range(24))
    assert to_ts_hash(value) == bytes(range(24))


def test_to_ts_hash_rejects_none():
    with pytest.raises(HubError) as info:
        to_ts_hash(None)
    assert info.value.code == "bad_request.internal_error"
    assert info.value.message == "message_ts_hash is not 24 bytes: None"


def test_to_ts_hash_rejects_wrong_length():
    with pytest.raises(HubError) as info:
        to_ts_hash(bytes([1, 10, 255]))
    assert info.value.code == "bad_request.internal_error"
    assert info.value.message.endswith("[1, a, ff]")