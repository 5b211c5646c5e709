"""Data-access services, one per record type.

Each service exposes the same five operations over whichever backing store
the settings select, so callers have a single code path per concern.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .client import ScholarSyncClient
from .config import Settings
from .const import AUDIENCE_ALL, BACKEND_REMOTE, DEFAULT_AUTHOR
from .mapping import (
	ANNOUNCEMENT_TABLE,
	ATTENDANCE_TABLE,
	CLASS_TABLE,
	GRADE_TABLE,
	STUDENT_TABLE,
	TableSpec,
)
from .models import RecordList
from .notifications import Notifier, get_notifier
from .stores import InMemoryRepository, MemoryRecordStore, RecordStore, RemoteRecordStore
from .utils import utcnow

_LOGGER = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class EntityService:
	"""get_all / get_by_id / create / update / delete for one record type."""

	def __init__(self, store: RecordStore) -> None:
		self._store = store

	@property
	def label(self) -> str:
		return self._store.label

	def defaults(self) -> Dict[str, Any]:
		"""Values used for attributes a create call leaves out."""
		return {}

	def _with_defaults(self, values: Dict[str, Any]) -> Dict[str, Any]:
		merged = self.defaults()
		merged.update(values)
		return merged

	def _order(self, records: RecordList) -> RecordList:
		return records

	async def get_all(self) -> RecordList:
		"""Every record. Check ``.failed`` on the result to spot a failed load."""
		records = await self._store.get_all()
		_LOGGER.debug(f"Loaded {len(records)} {self.label} records")
		return self._order(records)

	async def get_by_id(self, record_id: str):
		return await self._store.get_by_id(record_id)

	async def create(self, values: Dict[str, Any]):
		"""Create a record; omitted attributes get this service's defaults."""
		record = await self._store.create(self._with_defaults(values))
		_LOGGER.info(f"Created {self.label} {record.id}")
		return record

	async def update(self, record_id: str, values: Dict[str, Any]):
		"""Change only the given attributes of a record."""
		record = await self._store.update(record_id, values)
		_LOGGER.info(f"Updated {self.label} {record_id}")
		return record

	async def delete(self, record_id: str) -> bool:
		result = await self._store.delete(record_id)
		_LOGGER.info(f"Deleted {self.label} {record_id}")
		return result

	async def create_many(self, batch: Iterable[Dict[str, Any]]) -> List:
		"""Create several records; returns the ones the store accepted."""
		return await self._store.create_many([self._with_defaults(values) for values in batch])

	async def update_many(self, batch: Iterable[Tuple[str, Dict[str, Any]]]) -> List:
		return await self._store.update_many(list(batch))

	async def delete_many(self, record_ids: Iterable[str]) -> List[str]:
		return await self._store.delete_many(list(record_ids))


class StudentService(EntityService):
	def defaults(self) -> Dict[str, Any]:
		return {"phone": "", "parent_contact": "", "enrollment_date": utcnow()}


class ClassService(EntityService):
	def defaults(self) -> Dict[str, Any]:
		return {"student_ids": [], "teacher_id": None}


class AttendanceService(EntityService):
	def defaults(self) -> Dict[str, Any]:
		return {"notes": ""}


class GradeService(EntityService):
	def defaults(self) -> Dict[str, Any]:
		return {"date": utcnow()}


class AnnouncementService(EntityService):
	"""Announcements always come back newest first."""

	def defaults(self) -> Dict[str, Any]:
		return {"author": DEFAULT_AUTHOR, "audience": AUDIENCE_ALL, "created_at": utcnow()}

	def _order(self, records: RecordList) -> RecordList:
		ordered = sorted(records, key=lambda a: a.created_at or _OLDEST, reverse=True)
		return RecordList(ordered, error=records.error)


@dataclass
class SchoolServices:
	"""The five services sharing one backend and one notifier."""
	students: StudentService
	classes: ClassService
	attendance: AttendanceService
	grades: GradeService
	announcements: AnnouncementService
	notifier: Notifier
	backend: str
	client: Optional[ScholarSyncClient] = None

	async def __aenter__(self):
		if self.client is not None:
			await self.client.__aenter__()
		return self

	async def __aexit__(self, exc_type, exc_val, exc_tb):
		await self.close()

	async def close(self) -> None:
		if self.client is not None:
			await self.client.close()


def build_services(
	settings: Optional[Settings] = None,
	notifier: Optional[Notifier] = None,
	repository: Optional[InMemoryRepository] = None,
	client: Optional[ScholarSyncClient] = None,
) -> SchoolServices:
	"""Wire the services to the backing store the settings select.

	Args:
		settings: Validated settings; defaults to the in-memory backend
		notifier: Side channel for failures; a new one is created if omitted
		repository: In-memory tables to use; seeded from fixtures if omitted
		client: Remote API client to use; built from settings if omitted

	Returns:
		SchoolServices. On the remote backend the client session only opens
		inside `async with services:`; without it every fetch fails.
	"""
	settings = settings or Settings()
	notifier = get_notifier(notifier)

	if settings.backend == BACKEND_REMOTE:
		client = client or ScholarSyncClient(settings.api_url, settings.api_key)

		def make_store(spec: TableSpec) -> RecordStore:
			return RemoteRecordStore(client, spec, notifier)
	else:
		client = None
		repository = repository or InMemoryRepository.from_fixtures()

		def make_store(spec: TableSpec) -> RecordStore:
			return MemoryRecordStore(repository, spec, settings.latency_scale)

	_LOGGER.debug(f"Building services on the {settings.backend} backend")
	return SchoolServices(
		students=StudentService(make_store(STUDENT_TABLE)),
		classes=ClassService(make_store(CLASS_TABLE)),
		attendance=AttendanceService(make_store(ATTENDANCE_TABLE)),
		grades=GradeService(make_store(GRADE_TABLE)),
		announcements=AnnouncementService(make_store(ANNOUNCEMENT_TABLE)),
		notifier=notifier,
		backend=settings.backend,
		client=client,
	)
