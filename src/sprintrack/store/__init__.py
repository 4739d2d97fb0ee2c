"""
Reference store backends.
"""

from .base import ReferenceStore, PushIdGenerator, split_path, join_path
from .memory import MemoryStore
from .yaml_file import YamlFileStore
from .firebase import FirebaseStore

def build_store(settings) -> ReferenceStore:
    """Create the store selected by `settings.backend`."""
    if settings.backend == "memory":
        return MemoryStore(latency=settings.memory_latency)
    if settings.backend == "firebase":
        return FirebaseStore(
            settings.firebase.database_url,
            auth_token=settings.firebase.auth_token,
            timeout=settings.firebase.timeout,
        )
    return YamlFileStore(settings.data_file)

__all__ = [
    'ReferenceStore',
    'PushIdGenerator',
    'split_path',
    'join_path',
    'MemoryStore',
    'YamlFileStore',
    'FirebaseStore',
    'build_store',
]
