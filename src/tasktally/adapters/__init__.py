"""Adapters - I/O implementations of ports."""

from .memory_store import MemoryRecordStore
from .file_store import FileRecordStore
from .supabase_rest import SupabaseRecordStore
from .supabase_auth import SupabaseAuth
from .local_session import LocalSession

__all__ = [
    "MemoryRecordStore",
    "FileRecordStore",
    "SupabaseRecordStore",
    "SupabaseAuth",
    "LocalSession",
]
