"""In-memory key-value store with write batches."""


class TransactionBatch:
    """Pending puts and deletes, applied together by :meth:`Database.commit`."""

    def __init__(self):
        self._ops = {}

    def put(self, key, value):
        self._ops[bytes(key)] = bytes(value)

    def delete(self, key):
        self._ops[bytes(key)] = None

    def merge(self, other):
        """Take over every pending operation of ``other``; its entries win."""
        self._ops.update(other._ops)

    def get(self, key):
        """Return the pending value for ``key``, or None if absent or deleted."""
        return self._ops.get(bytes(key))

    def __contains__(self, key):
        return bytes(key) in self._ops

    def __len__(self):
        return len(self._ops)

    def _operations(self):
        return self._ops.items()


class Database:
    """A byte-keyed store in memory."""

    def __init__(self):
        self._data = {}

    def get(self, key):
        """Return the stored value for ``key``, or None."""
        return self._data.get(bytes(key))

    def commit(self, batch):
        for key, value in batch._operations():
            if value is None:
                self._data.pop(key, None)
            else:
                self._data[key] = value

    def clear(self):
        self._data.clear()

    def __len__(self):
        return len(self._data)