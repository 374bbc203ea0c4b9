"""Nodes of the sync Merkle trie, loaded lazily from a key-value store."""

from dataclasses import dataclass, field
from types import MappingProxyType

from .errors import HubError
from .node_codec import DbTrieNode, make_primary_key
from .util import blake3_20

TIMESTAMP_LENGTH = 10

# Upper bound on how many values a single get_all_values call collects.
MAX_VALUES_RETURNED_PER_CALL = 1024


@dataclass
class SerializedTrieNode:
    """A child that has not been loaded from the database yet."""

    hash: bytes | None = None


@dataclass
class TrieSnapshot:
    """Hashes of the subtrees beside a prefix, used to compare tries."""

    prefix: bytes
    excluded_hashes: list = field(default_factory=list)
    num_messages: int = 0


def _invalid(message):
    return HubError("bad_request.invalid_param", message)


class TrieNode:
    """A node of the Merkle trie.

    Keeps its hash and the number of items below it up to date as keys are
    inserted and deleted. Children are either loaded nodes or
    :class:`SerializedTrieNode` placeholders fetched from the database on use.
    """

    def __init__(self):
        self._hash = b""
        self._items = 0
        self._children = {}
        self._key = None

    def __repr__(self):
        return (
            f"TrieNode(items={self._items}, hash={self._hash.hex()!r}, "
            f"children={sorted(self._children)}, key={self._key!r})"
        )

    # Persistence

    def serialize(self):
        record = DbTrieNode(
            key=self._key or b"",
            child_chars=sorted(self._children),
            items=self._items,
            hash=self._hash,
        )
        return record.encode()

    @staticmethod
    def deserialize(data):
        record = DbTrieNode.decode(data)
        node = TrieNode()
        node._hash = bytes(record.hash)
        node._items = record.items
        node._children = {
            char & 0xFF: SerializedTrieNode() for char in record.child_chars
        }
        node._key = bytes(record.key) or None
        return node

    def _put_to_txn(self, txn, prefix):
        txn.put(make_primary_key(prefix), self.serialize())

    def _delete_to_txn(self, txn, prefix):
        txn.delete(make_primary_key(prefix))

    # Accessors

    def is_leaf(self):
        return not self._children

    def items(self):
        return self._items

    def hash(self):
        return self._hash

    def value(self):
        """The stored key; only leaves have one."""
        return self._key if self.is_leaf() else None

    def children(self):
        """Read-only view of the children, keyed by the next key byte."""
        return MappingProxyType(self._children)

    # Traversal

    def _get_or_load_child(self, db, prefix, char):
        if char not in self._children:
            raise _invalid(f"Child {char} at prefix {list(prefix)} not found")
        child = self._children[char]
        if isinstance(child, SerializedTrieNode):
            data = db.get(make_primary_key(prefix, char))
            child = TrieNode.deserialize(data) if data is not None else TrieNode()
            self._children[char] = child
        return child

    def get_node_from_trie(self, db, prefix, current_index=0):
        """Return the node at ``prefix``, loading children as needed, or None."""
        prefix = bytes(prefix)
        if current_index == len(prefix):
            return self
        char = prefix[current_index]
        if char not in self._children:
            return None
        try:
            child = self._get_or_load_child(db, prefix[:current_index], char)
        except HubError:
            return None
        return child.get_node_from_trie(db, prefix, current_index + 1)

    # Mutation

    def insert(self, db, txn, keys, current_index=0):
        """Insert ``keys``; returns for each whether it was newly added."""
        keys = [bytes(key) for key in keys]
        if not keys:
            raise _invalid("No keys to insert")

        # All keys share the prefix up to current_index.
        prefix = keys[0][:current_index]
        results = [False] * len(keys)

        # The timestamp part of the trie is never compacted.
        if current_index >= TIMESTAMP_LENGTH and self.is_leaf():
            offset = 0
            if self._key is None:
                self._key = keys.pop(0)
                self._items += 1
                self._update_hash(db, prefix)
                self._put_to_txn(txn, prefix)
                results[0] = True
                offset = 1

            remaining = [
                (i + offset, key) for i, key in enumerate(keys) if key != self._key
            ]
            if not remaining:
                return results

            self.split_leaf_node(db, txn, current_index)
        else:
            remaining = list(enumerate(keys))

        if any(current_index >= len(key) for _, key in remaining):
            raise _invalid("Key length exceeded")

        groups = {}
        for i, key in remaining:
            indices, group_keys = groups.setdefault(key[current_index], ([], []))
            indices.append(i)
            group_keys.append(key)

        successes = 0
        for char, (indices, group_keys) in groups.items():
            if char not in self._children:
                self._children[char] = TrieNode()
            child = self._get_or_load_child(db, prefix, char)
            child_results = child.insert(db, txn, group_keys, current_index + 1)
            for i, inserted in zip(indices, child_results):
                results[i] = inserted
                successes += inserted

        if successes:
            self._items += successes
            self._update_hash(db, prefix)
            self._put_to_txn(txn, prefix)

        return results

    def delete(self, db, txn, keys, current_index=0):
        """Delete ``keys``; returns for each whether it was present."""
        keys = [bytes(key) for key in keys]
        if not keys:
            raise _invalid("No keys to delete")

        prefix = keys[0][:current_index]
        results = [False] * len(keys)

        if self.is_leaf():
            for i, key in enumerate(keys):
                if (self._key or b"") == key:
                    self._key = None
                    self._items -= 1
                    self._delete_to_txn(txn, prefix)
                    self._update_hash(db, prefix)
                    results[i] = True
                    break
            return results

        if any(current_index >= len(key) for key in keys):
            raise _invalid("Key length exceeded")

        groups = {}
        for i, key in enumerate(keys):
            groups.setdefault(key[current_index], []).append((i, key))

        successes = 0
        for char, entries in groups.items():
            if char not in self._children:
                continue
            child = self._get_or_load_child(db, prefix, char)
            indices = [i for i, _ in entries]
            child_results = child.delete(
                db, txn, [key for _, key in entries], current_index + 1
            )
            # An empty child must go, so the hash matches a trie that never had it.
            if child._items == 0:
                del self._children[char]
            for i, deleted in zip(indices, child_results):
                results[i] = deleted
                successes += deleted

        if successes:
            self._items -= successes

            if self._items == 0:
                self._delete_to_txn(txn, prefix)
                self._update_hash(db, prefix)
                return results

            if (
                self._items == 1
                and len(self._children) == 1
                and current_index >= TIMESTAMP_LENGTH
            ):
                (char,) = self._children
                child = self._get_or_load_child(db, prefix, char)
                if child._key is not None:
                    self._key = child._key
                    child._key = None
                    del self._children[char]
                    self._delete_to_txn(txn, prefix + bytes([char]))

            self._update_hash(db, prefix)
            self._put_to_txn(txn, prefix)

        return results

    def exists(self, db, key, current_index=0):
        key = bytes(key)
        if self.is_leaf():
            return (self._key or b"") == key
        if current_index >= len(key):
            return False
        char = key[current_index]
        if char not in self._children:
            return False
        child = self._get_or_load_child(db, key[:current_index], char)
        return child.exists(db, key, current_index + 1)

    def split_leaf_node(self, db, txn, current_index):
        """Turn this leaf into an inner node whose one child holds its key."""
        key = self._key
        if key is None:
            raise _invalid("Cannot split a node without a value")
        if current_index >= len(key):
            raise _invalid("Key length exceeded")
        self._key = None
        prefix = key[:current_index]

        child = TrieNode()
        self._children[key[current_index]] = child
        child.insert(db, txn, [key], current_index + 1)

        self._update_hash(db, prefix)
        self._put_to_txn(txn, prefix)

    # Hashing

    def _update_hash(self, db, prefix):
        if self.is_leaf():
            self._hash = blake3_20(self._key or b"")
            return
        parts = []
        for char in sorted(self._children):
            child = self._children[char]
            if isinstance(child, SerializedTrieNode):
                child_hash = child.hash
            else:
                child_hash = child._hash
            if not child_hash:
                child_hash = self._get_or_load_child(db, prefix, char)._hash
            parts.append(child_hash)
        self._hash = blake3_20(b"".join(parts))

    def _excluded_hash(self, db, prefix, prefix_char):
        excluded_items = 0
        parts = []
        for char in sorted(self._children):
            if char == prefix_char:
                continue
            child = self._get_or_load_child(db, prefix, char)
            parts.append(child._hash)
            excluded_items += child._items
        return excluded_items, blake3_20(b"".join(parts)).hex()

    def unload_children(self):
        """Replace loaded children with placeholders that remember their hash."""
        self._children = {
            char: SerializedTrieNode(child._hash)
            if isinstance(child, TrieNode)
            else child
            for char, child in self._children.items()
        }

    # Queries

    def get_all_values(self, db, prefix=b""):
        """Keys below this node in byte order, stopping soon after the call limit."""
        prefix = bytes(prefix)
        if self.is_leaf():
            return [self._key or b""]
        values = []
        for char in sorted(self._children):
            child = self._get_or_load_child(db, prefix, char)
            values.extend(child.get_all_values(db, prefix + bytes([char])))
            if len(values) > MAX_VALUES_RETURNED_PER_CALL:
                break
        return values

    def get_snapshot(self, db, prefix, current_index=0):
        prefix = bytes(prefix)
        excluded_hashes = []
        num_messages = 0

        node = self
        for i in range(current_index, len(prefix)):
            char = prefix[i]
            current_prefix = prefix[:i]
            excluded_items, excluded_hash = node._excluded_hash(
                db, current_prefix, char
            )
            excluded_hashes.append(excluded_hash)
            num_messages += excluded_items

            if char not in node._children:
                return TrieSnapshot(current_prefix, excluded_hashes, num_messages)

            node = node._get_or_load_child(db, current_prefix, char)

        excluded_hashes.append(node._hash.hex())
        return TrieSnapshot(prefix, excluded_hashes, num_messages)