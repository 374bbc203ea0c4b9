"""Merkle sync trie over byte keys, with BLAKE3-20 hashes and an in-memory batched store."""

__version__ = "0.1.0"
__all__ = ["__version__"]