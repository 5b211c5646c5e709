"""Backing store on the remote generic-record API."""

import logging
from typing import Any, Dict, Iterable, List, Tuple

from ..client import ScholarSyncClient
from ..exceptions import (
	FETCH_ERRORS,
	ScholarSyncDataError,
	ScholarSyncNotFoundError,
	ScholarSyncValidationError,
)
from ..mapping import ID_COLUMN, TableSpec
from ..models import RecordList
from ..notifications import Notifier
from .base import RecordStore

_LOGGER = logging.getLogger(__name__)


def _remote_id(record_id: Any) -> Any:
	"""The API numbers its rows; send numeric ids as numbers."""
	text = str(record_id)
	return int(text) if text.isdigit() else text


class RemoteRecordStore(RecordStore):
	"""RecordStore that maps one record type onto a remote table.

	Field names and value types are translated both ways through the
	TableSpec. Mutations are sent as batches; each entry of a batch succeeds
	or fails on its own, failures are reported through the notifier and only
	the successful entries are returned.
	"""

	def __init__(self, client: ScholarSyncClient, spec: TableSpec, notifier: Notifier) -> None:
		super().__init__(spec)
		self._client = client
		self._notifier = notifier

	@property
	def _plural(self) -> str:
		return f"{self.label.lower()}s"

	def _order_by(self):
		if not self.spec.order_by:
			return None
		attr, direction = self.spec.order_by
		return [{"field": self.spec.field(attr).column, "direction": direction}]

	def _parse_rows(self, rows: List[Dict[str, Any]]) -> List[Any]:
		records = []
		for row in rows:
			try:
				records.append(self.spec.record_from_row(row))
			except ScholarSyncDataError as e:
				_LOGGER.warning(f"Skipping unreadable {self.label} row: {e}")
				continue
		return records

	async def get_all(self) -> RecordList:
		"""Fetch every row; a failed fetch yields an empty list carrying the error."""
		try:
			rows = await self._client.fetch_records(self.spec.table, self.spec.columns, order_by=self._order_by())
		except FETCH_ERRORS as e:
			message = f"Failed to load {self._plural}: {e}"
			_LOGGER.error(message)
			self._notifier.error(message)
			return RecordList(error=str(e))
		return RecordList(self._parse_rows(rows))

	async def get_by_id(self, record_id: str):
		row = await self._client.get_record(self.spec.table, _remote_id(record_id), self.spec.columns)
		if row is None:
			raise ScholarSyncNotFoundError(f"{self.label} not found: {record_id}")
		return self.spec.record_from_row(row)

	async def create(self, values: Dict[str, Any]):
		return (await self.create_many([values]))[0]

	async def update(self, record_id: str, values: Dict[str, Any]):
		return (await self.update_many([(record_id, values)]))[0]

	async def delete(self, record_id: str) -> bool:
		await self.delete_many([record_id])
		return True

	async def create_many(self, batch: Iterable[Dict[str, Any]]) -> List:
		rows = [self.spec.row_from_fields(values) for values in batch]
		results = await self._client.create_records(self.spec.table, rows)
		succeeded = self._collect(results, "create")
		return [self.spec.record_from_row(result.get("data") or {}) for _, result in succeeded]

	async def update_many(self, batch: Iterable[Tuple[str, Dict[str, Any]]]) -> List:
		rows = []
		for record_id, values in batch:
			row = self.spec.row_from_fields(values)
			row[ID_COLUMN] = _remote_id(record_id)
			rows.append(row)
		results = await self._client.update_records(self.spec.table, rows)
		succeeded = self._collect(results, "update")
		return [self.spec.record_from_row(result.get("data") or {}) for _, result in succeeded]

	async def delete_many(self, record_ids: Iterable[str]) -> List[str]:
		record_ids = [str(record_id) for record_id in record_ids]
		results = await self._client.delete_records(self.spec.table, [_remote_id(i) for i in record_ids])
		succeeded = self._collect(results, "delete")
		return [record_ids[index] for index, _ in succeeded if index < len(record_ids)]

	def _collect(self, results: List[Dict[str, Any]], action: str) -> List[Tuple[int, Dict[str, Any]]]:
		"""Split batch results, report each failure, and return the successes.

		Returns:
			(position in the batch, result) for every successful entry

		Raises:
			ScholarSyncNotFoundError: nothing succeeded and no failure names a
				field, on update/delete
			ScholarSyncValidationError: nothing succeeded otherwise
		"""
		succeeded = []
		failures = []
		for index, result in enumerate(results):
			if result.get("success"):
				succeeded.append((index, result))
				continue
			failures.append(result)
			self._report_failure(index, result, action)

		if failures:
			_LOGGER.warning(f"Failed to {action} {len(failures)} of {len(results)} {self._plural}")

		if not succeeded:
			message = f"Failed to {action} {self.label.lower()}"
			field_errors = [f for f in failures if f.get("errors")]
			if action != "create" and failures and not field_errors:
				detail = failures[0].get("message")
				raise ScholarSyncNotFoundError(f"{message}: {detail}" if detail else message)
			raise ScholarSyncValidationError(message, failures)
		return succeeded

	def _report_failure(self, index: int, result: Dict[str, Any], action: str) -> None:
		errors = result.get("errors") or []
		if not errors:
			message = result.get("message") or f"Failed to {action} {self.label.lower()} #{index + 1}"
			_LOGGER.error(f"{self.label} #{index + 1} {action} failed: {message}")
			self._notifier.error(message)
			return
		for error in errors:
			label = error.get("fieldLabel") or error.get("field") or "Record"
			message = f"{label}: {error.get('message', 'invalid value')}"
			_LOGGER.error(f"{self.label} #{index + 1} {action} failed: {message}")
			self._notifier.error(message)
