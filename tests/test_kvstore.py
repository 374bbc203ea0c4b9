from synctrie.kvstore import Database, TransactionBatch


def test_batch_put_and_get():
    batch = TransactionBatch()
    batch.put(b"k1", b"v1")
    assert batch.get(b"k1") == b"v1"
    assert b"k1" in batch
    assert len(batch) == 1


def test_batch_get_missing_is_none():
    batch = TransactionBatch()
    assert batch.get(b"missing") is None
    assert b"missing" not in batch


def test_batch_delete_is_recorded():
    batch = TransactionBatch()
    batch.put(b"k", b"v")
    batch.delete(b"k")
    assert b"k" in batch
    assert batch.get(b"k") is None
    assert len(batch) == 1


def test_merge_overrides_with_other():
    first = TransactionBatch()
    first.put(b"a", b"1")
    first.put(b"b", b"2")
    second = TransactionBatch()
    second.put(b"b", b"3")
    second.delete(b"a")
    second.put(b"c", b"4")
    first.merge(second)
    assert len(first) == 3
    assert first.get(b"a") is None
    assert first.get(b"b") == b"3"
    assert first.get(b"c") == b"4"


def test_commit_applies_puts_and_deletes():
    db = Database()
    batch = TransactionBatch()
    batch.put(b"a", b"1")
    batch.put(b"b", b"2")
    db.commit(batch)
    assert db.get(b"a") == b"1"
    assert len(db) == 2

    batch = TransactionBatch()
    batch.delete(b"a")
    batch.delete(b"never-there")
    db.commit(batch)
    assert db.get(b"a") is None
    assert db.get(b"b") == b"2"
    assert len(db) == 1


def test_keys_are_normalised_to_bytes():
    db = Database()
    batch = TransactionBatch()
    batch.put(bytearray(b"key"), [1, 2])
    db.commit(batch)
    assert db.get(b"key") == bytes([1, 2])
    assert db.get([107, 101, 121]) == bytes([1, 2])


def test_clear_empties_database():
    db = Database()
    batch = TransactionBatch()
    batch.put(b"x", b"y")
    db.commit(batch)
    db.clear()
    assert len(db) == 0
    assert db.get(b"x") is None


def test_uncommitted_batch_does_not_touch_database():
    db = Database()
    batch = TransactionBatch()
    batch.put(b"x", b"y")
    assert db.get(b"x") is None