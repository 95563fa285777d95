"""Abstract interfaces for infrastructure dependencies."""

from .storage import ObjectSummary, StorageClient, StoredObject

__all__ = ["StorageClient", "ObjectSummary", "StoredObject"]
