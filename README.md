# synctrie

A Merkle trie over byte-string keys, for comparing and synchronising
sets of keys between peers. Each node carries a 20-byte hash (the first
20 bytes of BLAKE3) and a count of the keys beneath it, so two tries
holding the same keys have the same root hash whatever order the keys
went in.

Keys must be at least 10 bytes long. The first 10 bytes are treated as a
timestamp and are never compacted, which keeps snapshots taken by
timestamp prefix comparable. Below that depth a leaf holds its whole key
until another key forces it to split, and deleting keys compacts such
branches again.

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Usage

Trie nodes are written through `synctrie.kvstore.TransactionBatch`
objects into a `synctrie.kvstore.Database`. Nothing reaches the database
until `Database.commit(batch)` is called, and `MerkleTrie.reload(db)`
discards uncommitted changes by loading the root again from the database.

```python
from synctrie.kvstore import Database, TransactionBatch
from synctrie.merkle_trie import MerkleTrie

db = Database()
trie = MerkleTrie()

batch = TransactionBatch()
trie.initialize(db, batch)
trie.insert(db, batch, [b"0000482712", b"0000482713"])   # [True, True]
db.commit(batch)
trie.reload(db)

trie.items()                        # 2
trie.root_hash().hex()
trie.exists(db, b"0000482712")      # True
trie.get_all_values(db, b"")        # [b"0000482712", b"0000482713"]
```

Rolling back an uncommitted insert:

```python
batch = TransactionBatch()
trie.insert(db, batch, [b"0000482714"])
trie.reload(db)        # the insert above is gone
```

`insert` and `delete` take a list of keys and return a list of booleans:
whether each key was newly added, or was present and removed.

### Inspecting the trie

- `MerkleTrie.get_node(db, batch, prefix)` returns the stored
  `TrieNode` at a prefix, reading the pending batch first and then the
  database, or `None`.
- `MerkleTrie.get_trie_node_metadata(db, batch, prefix)` returns a
  `NodeMetadata` with the prefix, message count, hex hash and, one level
  deep, the metadata of each child.
- `MerkleTrie.get_snapshot(db, prefix)` returns a
  `synctrie.trie_node.TrieSnapshot` holding the hex hashes of the
  subtrees beside each byte of the prefix and the number of messages in
  them.
- `MerkleTrie.get_all_values(db, prefix)` returns the keys under a
  prefix in byte order; one call stops collecting soon after 1024 values.

`synctrie.trie_node.TrieNode` can also be used directly; its
`unload_children()` replaces loaded children with placeholders that are
read back from the database when next needed. Nodes are stored in the
format of `synctrie.node_codec.DbTrieNode`, under keys built by
`make_primary_key(prefix, child_char)`.

### Errors

Failures raise `synctrie.errors.HubError`, with a `code` such as
`bad_request.invalid_param` or `bad_request.internal_error` and a
`message`. For example: a key shorter than 10 bytes, using a trie before
`initialize`, or asking for metadata of a node that does not exist.

### Helpers

`synctrie.util` provides `blake3_20`, `bytes_compare` (returns -1, 0 or
1), `increment_bytes` and `decrement_bytes` (big-endian arithmetic on
byte strings), and `to_ts_hash`, which checks that a value is a 24-byte
timestamp hash. `synctrie.blake3` is a BLAKE3 hash in plain Python:
`blake3(data, length)` or the incremental `Blake3` class.

## What it does not do

The database is in memory only; nothing is written to disk, and the
contents are lost when the process ends. There is no command-line tool,
no network synchronisation between peers and no message store: the
package provides the trie and the snapshot data needed to compare tries.