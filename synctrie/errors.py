"""Error type shared by the storage and trie modules."""


class HubError(Exception):
    """An error carrying a machine-readable code and a human-readable message."""

    def __init__(self, code, message):
        super().__init__(code, message)
        self.code = code
        self.message = message

    def __str__(self):
        return f"{self.code}/{self.message}"

    def __repr__(self):
        return f"HubError(code={self.code!r}, message={self.message!r})"