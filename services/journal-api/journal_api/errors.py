class EntryNotFoundError(LookupError):
    """Raised when an update targets an entry id that does not exist."""

    def __init__(self, entry_id: str):
        super().__init__(f"Journal entry {entry_id!r} not found")
        self.entry_id = entry_id


class StorageIOError(OSError):
    """Raised when the underlying database fails (disk error, lock timeout)."""
