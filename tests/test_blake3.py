import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from synctrie.blake3 import Blake3, blake3


def test_empty_input_known_value():
    assert blake3(b"").hex() == (
        "af1349b9f5f9a1a6a0404dea36dcc9499bcb25c9adc112b7cc9a93cae41f3262"
    )


def test_abc_known_value():
    assert Blake3(b"abc").hexdigest() == (
        "6437b3ac38465133ffb63b75273a8db548c558465d79db03fd359c6cd5bd9d85"
    )


def test_default_length_is_32():
    assert len(blake3(b"data")) == 32


def test_shorter_output_is_prefix_of_longer():
    long = blake3(b"hello", 200)
    assert len(long) == 200
    assert blake3(b"hello", 20) == long[:20]
    assert blake3(b"hello") == long[:32]


def test_digest_does_not_change_state():
    hasher = Blake3(b"first part")
    first = hasher.digest()
    assert hasher.digest() == first
    hasher.update(b" second part")
    assert hasher.digest() == blake3(b"first part second part")


def test_update_returns_hasher():
    hasher = Blake3()
    assert hasher.update(b"x") is hasher


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        Blake3(b"x").digest(-1)


@pytest.mark.parametrize("size", [63, 64, 65, 1023, 1024, 1025, 2048, 3073, 8193])
def test_incremental_matches_one_shot_across_boundaries(size):
    data = bytes(i % 251 for i in range(size))
    hasher = Blake3()
    for start in range(0, size, 97):
        hasher.update(data[start:start + 97])
    assert hasher.digest() == blake3(data)


@pytest.mark.parametrize("size", [1024, 1025, 2049])
def test_different_inputs_differ(size):
    data = bytes(size)
    changed = data[:-1] + b"\x01"
    assert blake3(data) != blake3(changed)
    assert blake3(data) != blake3(data + b"\x00")


@settings(max_examples=30, deadline=None)
@given(st.binary(max_size=2500), st.integers(min_value=1, max_value=700))
def test_split_point_does_not_matter(data, cut):
    cut = min(cut, len(data))
    hasher = Blake3(data[:cut])
    hasher.update(data[cut:])
    assert hasher.digest(40) == blake3(data, 40)