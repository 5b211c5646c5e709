"""Backing stores for the data-access services."""

from .base import RecordStore
from .memory import InMemoryRepository, MemoryRecordStore
from .remote import RemoteRecordStore

__all__ = [
	"InMemoryRepository",
	"MemoryRecordStore",
	"RecordStore",
	"RemoteRecordStore",
]
