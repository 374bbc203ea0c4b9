"""The sync Merkle trie: a root node persisted in a key-value store."""

from dataclasses import dataclass, field

from .errors import HubError
from .kvstore import TransactionBatch
from .node_codec import make_primary_key
from .trie_node import TIMESTAMP_LENGTH, TrieNode

TRIE_DBPATH_PREFIX = "trieDb"


@dataclass
class NodeMetadata:
    """Summary of a trie node and, one level deep, of its children."""

    prefix: bytes
    num_messages: int
    hash: str
    children: dict = field(default_factory=dict)


def _internal(message):
    return HubError("bad_request.internal_error", message)


def _invalid(message):
    return HubError("bad_request.invalid_param", message)


def _check_key_lengths(keys):
    if any(len(key) < TIMESTAMP_LENGTH for key in keys):
        raise _invalid("Key length is too short")


class MerkleTrie:
    """A Merkle trie whose nodes are written through transaction batches."""

    def __init__(self):
        self._root = None

    def _require_root(self, operation):
        if self._root is None:
            raise _internal(f"Merkle Trie not initialized for {operation}")
        return self._root

    @staticmethod
    def _load_root(db):
        data = db.get(make_primary_key(b""))
        if data is None:
            return None
        return TrieNode.deserialize(data)

    def initialize(self, db, txn_batch):
        """Load the root from ``db``, or create an empty one in ``txn_batch``."""
        root = self._load_root(db)
        if root is None:
            root = TrieNode()
            txn_batch.put(make_primary_key(b""), root.serialize())
        self._root = root

    def reload(self, db):
        """Discard uncommitted changes by reloading the root from ``db``."""
        root = self._load_root(db)
        if root is None:
            raise _internal("Unable to reload root")
        self._root = root

    def insert(self, db, txn_batch, keys):
        """Insert ``keys``; returns for each whether it was newly added."""
        keys = [bytes(key) for key in keys]
        if not keys:
            return []
        _check_key_lengths(keys)
        if self._root is None:
            raise _internal(
                f"Merkle Trie not initialized for insert {[list(k) for k in keys]}"
            )
        txn = TransactionBatch()
        results = self._root.insert(db, txn, keys, 0)
        txn_batch.merge(txn)
        return results

    def delete(self, db, txn_batch, keys):
        """Delete ``keys``; returns for each whether it was present."""
        keys = [bytes(key) for key in keys]
        if not keys:
            return []
        _check_key_lengths(keys)
        root = self._require_root("delete")
        txn = TransactionBatch()
        results = root.delete(db, txn, keys, 0)
        txn_batch.merge(txn)
        return results

    def exists(self, db, key):
        return self._require_root("exists").exists(db, key, 0)

    def items(self):
        return self._require_root("items").items()

    def root_hash(self):
        return self._require_root("root_hash").hash()

    def get_node(self, db, txn_batch, prefix):
        """Read the node at ``prefix``, preferring pending writes, or None."""
        node_key = make_primary_key(prefix)
        for data in (txn_batch.get(node_key), db.get(node_key)):
            if data is None:
                continue
            try:
                return TrieNode.deserialize(data)
            except HubError:
                continue
        return None

    def get_all_values(self, db, prefix):
        root = self._require_root("get_all_values")
        node = root.get_node_from_trie(db, prefix, 0)
        if node is None:
            return []
        return node.get_all_values(db, prefix)

    def get_snapshot(self, db, prefix):
        return self._require_root("get_snapshot").get_snapshot(db, prefix, 0)

    def get_trie_node_metadata(self, db, txn_batch, prefix):
        prefix = bytes(prefix)
        node = self.get_node(db, txn_batch, prefix)
        if node is None:
            raise _invalid("Node not found")

        children = {}
        for char in node.children():
            child_prefix = prefix + bytes([char])
            child = self.get_node(db, txn_batch, child_prefix)
            if child is None:
                raise _internal("Child Node not found")
            children[char] = NodeMetadata(
                prefix=child_prefix,
                num_messages=child.items(),
                hash=child.hash().hex(),
            )

        return NodeMetadata(
            prefix=prefix,
            num_messages=node.items(),
            hash=node.hash().hex(),
            children=children,
        )