"""In-memory backing store seeded from the packaged fixture files."""

import asyncio
import copy
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..const import FIXTURE_FILES, OP_CREATE, OP_DELETE, OP_GET_ALL, OP_GET_BY_ID, OP_UPDATE, OPERATION_DELAYS
from ..exceptions import ScholarSyncDataError, ScholarSyncNotFoundError
from ..mapping import TABLE_SPECS, TableSpec
from ..models import RecordList
from .base import RecordStore

_LOGGER = logging.getLogger(__name__)

FIXTURES_DIR = Path(__file__).resolve().parent.parent / "fixtures"


class InMemoryRepository:
	"""Process-lifetime tables of records for local development.

	- One ordered list per table, seeded once when the repository is built.
	- Mutations are serialised with an asyncio lock.
	- Nothing is written back; a restart starts from the fixtures again.
	"""

	def __init__(self, tables: Optional[Dict[str, List[Any]]] = None) -> None:
		self._tables: Dict[str, List[Any]] = {name: [] for name in TABLE_SPECS}
		for name, records in (tables or {}).items():
			if name not in self._tables:
				raise ScholarSyncDataError(f"Unknown table: {name}")
			self._tables[name] = list(records)
		self._lock: Optional[asyncio.Lock] = None

	@classmethod
	def from_fixtures(cls, fixtures_dir: Optional[Path] = None) -> "InMemoryRepository":
		"""Build a repository seeded from the JSON fixture files."""
		directory = Path(fixtures_dir) if fixtures_dir else FIXTURES_DIR
		tables = {}
		for name, filename in FIXTURE_FILES.items():
			path = directory / filename
			if not path.exists():
				_LOGGER.warning(f"No fixture file for table {name} at {path}")
				continue
			try:
				raw_records = json.loads(path.read_text(encoding="utf-8"))
			except json.JSONDecodeError as err:
				raise ScholarSyncDataError(f"Invalid fixture file {path}: {err}") from err
			spec = TABLE_SPECS[name]
			tables[name] = [spec.record_from_fixture(raw) for raw in raw_records]
			_LOGGER.debug(f"Seeded {len(tables[name])} {name} records from {path.name}")
		return cls(tables)

	@property
	def lock(self) -> asyncio.Lock:
		# Created on first use so it binds to the running loop
		if self._lock is None:
			self._lock = asyncio.Lock()
		return self._lock

	def table(self, name: str) -> List[Any]:
		"""The live list backing a table."""
		return self._tables[name]

	def count(self, name: str) -> int:
		return len(self._tables[name])


class MemoryRecordStore(RecordStore):
	"""RecordStore over one table of an InMemoryRepository.

	Every operation first sleeps a fixed delay for its kind, scaled by
	``latency_scale``, so loading states can be exercised without a network.
	"""

	def __init__(self, repository: InMemoryRepository, spec: TableSpec, latency_scale: float = 1.0) -> None:
		super().__init__(spec)
		self._repository = repository
		self._latency_scale = latency_scale

	@property
	def _records(self) -> List[Any]:
		return self._repository.table(self.spec.table)

	async def _simulate_latency(self, operation: str) -> None:
		delay = OPERATION_DELAYS[operation] * self._latency_scale
		if delay > 0:
			await asyncio.sleep(delay)

	def _index_of(self, record_id: str) -> int:
		for index, record in enumerate(self._records):
			if record.id == record_id:
				return index
		raise ScholarSyncNotFoundError(f"{self.label} not found: {record_id}")

	def _coerce(self, values: Dict[str, Any]) -> Dict[str, Any]:
		"""Check attribute names and coerce values the way stored rows are read."""
		self.spec.check_fields(values)
		return {
			attr: self.spec.field(attr).to_python(copy.deepcopy(value))
			for attr, value in values.items()
			if attr != "id"
		}

	async def get_all(self) -> RecordList:
		await self._simulate_latency(OP_GET_ALL)
		async with self._repository.lock:
			return RecordList(copy.deepcopy(self._records))

	async def get_by_id(self, record_id: str):
		await self._simulate_latency(OP_GET_BY_ID)
		async with self._repository.lock:
			return copy.deepcopy(self._records[self._index_of(record_id)])

	async def create(self, values: Dict[str, Any]):
		await self._simulate_latency(OP_CREATE)
		values = self._coerce(values)
		try:
			record = self.spec.model(id=uuid.uuid4().hex, **values)
		except TypeError as err:
			raise ScholarSyncDataError(f"Cannot create {self.label}: {err}") from err

		async with self._repository.lock:
			if self.spec.prepend_new:
				self._records.insert(0, record)
			else:
				self._records.append(record)
		_LOGGER.debug(f"Created {self.label} {record.id}")
		return copy.deepcopy(record)

	async def update(self, record_id: str, values: Dict[str, Any]):
		await self._simulate_latency(OP_UPDATE)
		changes = self._coerce(values)

		async with self._repository.lock:
			index = self._index_of(record_id)
			record = copy.deepcopy(self._records[index])
			for attr, value in changes.items():
				setattr(record, attr, value)
			self._records[index] = record
		_LOGGER.debug(f"Updated {self.label} {record_id}: {sorted(changes)}")
		return copy.deepcopy(record)

	async def delete(self, record_id: str) -> bool:
		await self._simulate_latency(OP_DELETE)
		async with self._repository.lock:
			index = self._index_of(record_id)
			del self._records[index]
		_LOGGER.debug(f"Deleted {self.label} {record_id}")
		return True
