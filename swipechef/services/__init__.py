"""Services module for external storage."""

from .storage import storage_service, StorageService

__all__ = [
    "storage_service",
    "StorageService",
]
