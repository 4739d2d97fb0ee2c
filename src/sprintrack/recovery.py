class SprintrackError(Exception):
    """Base exception for all sprintrack errors."""
    pass

class RecoverableError(SprintrackError):
    """An error that can be recovered from without data loss."""
    pass

class FatalError(SprintrackError):
    """An error that requires application termination or major intervention."""
    pass

class CorruptionError(FatalError):
    """Corrupted Data Error - stored documents that break the reference graph or its models"""
    pass

class NotFound(RecoverableError):
    """A requested entity does not exist in the store."""

    def __init__(self, collection: str, key: str):
        self.collection = collection
        self.key = key
        super().__init__(f"{collection}/{key} does not exist")

class InvalidInput(RecoverableError):
    """Creation input was empty or whitespace only."""
    pass

class StoreError(RecoverableError):
    """A call against the reference store failed."""
    pass

class FileOperationError(RecoverableError):
    """File operation failed but can be retried."""
    pass

class MigrationNeededError(RecoverableError):
    """ Data is valid, but may need a migration """
    pass

class DanglingReference(CorruptionError):
    """A reference map points at an entity that no longer exists."""

    def __init__(self, collection: str, key: str, referrer: str):
        self.collection = collection
        self.key = key
        self.referrer = referrer
        super().__init__(f"{referrer} references missing {collection}/{key}")

class PartialWriteFailure(CorruptionError):
    """The second write of a multi-write sequence failed, orphaning the first record."""

    def __init__(self, collection: str, orphan_key: str, reason: str):
        self.collection = collection
        self.orphan_key = orphan_key
        super().__init__(f"{collection}/{orphan_key} was written but not linked: {reason}")
