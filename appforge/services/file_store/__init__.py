from appforge.services.file_store.base import EntryInfo, StorageBackend
from appforge.services.file_store.flat import FlatMapBackend
from appforge.services.file_store.native import NativeFileBackend
from appforge.services.file_store.persistence import (
    FlatStatePersistence,
    JsonFilePersistence,
    MemoryPersistence,
    RedisPersistence,
)
from appforge.services.file_store.store import (
    SCAFFOLD_DIRECTORIES,
    FileStore,
    build_file_store,
    build_persistence,
)

__all__ = [
    "EntryInfo",
    "StorageBackend",
    "FlatMapBackend",
    "NativeFileBackend",
    "FlatStatePersistence",
    "JsonFilePersistence",
    "MemoryPersistence",
    "RedisPersistence",
    "SCAFFOLD_DIRECTORIES",
    "FileStore",
    "build_file_store",
    "build_persistence",
]
