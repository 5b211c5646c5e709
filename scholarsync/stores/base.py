"""Contract shared by every backing store."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Tuple

from ..mapping import TableSpec
from ..models import RecordList


class RecordStore(ABC):
	"""Persistence for one record type.

	Implementations return copies; callers never hold the stored objects.
	"""

	def __init__(self, spec: TableSpec) -> None:
		self.spec = spec

	@property
	def label(self) -> str:
		return self.spec.label

	@abstractmethod
	async def get_all(self) -> RecordList:
		"""Every stored record."""

	@abstractmethod
	async def get_by_id(self, record_id: str):
		"""One record; raises ScholarSyncNotFoundError when absent."""

	@abstractmethod
	async def create(self, values: Dict[str, Any]):
		"""Store a new record and return it with its assigned id."""

	@abstractmethod
	async def update(self, record_id: str, values: Dict[str, Any]):
		"""Merge the given attributes into a record and return it."""

	@abstractmethod
	async def delete(self, record_id: str) -> bool:
		"""Remove a record."""

	async def create_many(self, batch: Iterable[Dict[str, Any]]) -> List:
		"""Create several records; the first failure propagates."""
		return [await self.create(values) for values in batch]

	async def update_many(self, batch: Iterable[Tuple[str, Dict[str, Any]]]) -> List:
		"""Update several (id, values) pairs; the first failure propagates."""
		return [await self.update(record_id, values) for record_id, values in batch]

	async def delete_many(self, record_ids: Iterable[str]) -> List[str]:
		"""Delete several records and return the deleted ids."""
		deleted = []
		for record_id in record_ids:
			await self.delete(record_id)
			deleted.append(record_id)
		return deleted
