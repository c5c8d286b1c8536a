"""
Persistence adapters.

Every collection lives in its own JSON file managed by a DocumentStore.
Services depend on the DocumentStore API instead of touching the files.
"""

from .json_storage import DocumentStore

__all__ = ["DocumentStore"]
