"""Field maps between the domain records and the stored rows.

Each record type has a TableSpec naming its table and, per attribute, the
column it is stored under and how values are coerced on the way in and out.
The remote store speaks in column names; the fixture files use camelCase
attribute names. Both end up as the dataclasses in ``models``.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Type

from .const import (
	TABLE_ANNOUNCEMENTS,
	TABLE_ATTENDANCE,
	TABLE_CLASSES,
	TABLE_GRADES,
	TABLE_STUDENTS,
)
from .exceptions import ScholarSyncDataError
from .models import (
	Announcement,
	AttendanceRecord,
	ClassSection,
	Grade,
	Student,
	field_names,
)
from .utils import camel_to_snake, format_date, parse_date

_LOGGER = logging.getLogger(__name__)

ID_COLUMN = "Id"

KIND_TEXT = "text"
KIND_INT = "int"
KIND_FLOAT = "float"
KIND_DATETIME = "datetime"
KIND_ID_LIST = "id_list"
KIND_REF = "ref"

ORDER_DESC = "DESC"
ORDER_ASC = "ASC"


def coerce_ref(value: Any) -> Optional[str]:
	"""Turn a stored reference (number, string or lookup object) into an id."""
	if value is None or value == "":
		return None
	if isinstance(value, dict):
		value = value.get(ID_COLUMN, value.get("id"))
		if value is None:
			return None
	if isinstance(value, float) and value.is_integer():
		value = int(value)
	return str(value)


def coerce_id_list(value: Any) -> List[str]:
	"""Turn "1,2,3", [1, 2, 3] or lookup objects into a list of ids."""
	if value is None or value == "":
		return []
	if isinstance(value, str):
		return [part.strip() for part in value.split(",") if part.strip()]
	if isinstance(value, (list, tuple, set)):
		ids = [coerce_ref(item) for item in value]
		return [item for item in ids if item is not None]
	ref = coerce_ref(value)
	return [ref] if ref is not None else []


def _coerce_number(value: Any, kind: str):
	number_type = int if kind == KIND_INT else float
	if value is None or value == "":
		return number_type(0)
	try:
		if kind == KIND_INT:
			return int(float(value))
		return float(value)
	except (TypeError, ValueError):
		_LOGGER.warning(f"Expected a number, got {value!r}")
		return number_type(0)


@dataclass(frozen=True)
class FieldSpec:
	"""One attribute of a record and the column it is stored under."""
	attr: str
	column: str
	kind: str = KIND_TEXT

	def to_python(self, value: Any) -> Any:
		"""Coerce a stored value, replacing missing ones with safe defaults."""
		if self.kind in (KIND_INT, KIND_FLOAT):
			return _coerce_number(value, self.kind)
		if self.kind == KIND_DATETIME:
			return parse_date(value)
		if self.kind == KIND_ID_LIST:
			return coerce_id_list(value)
		if self.kind == KIND_REF:
			return coerce_ref(value)
		return "" if value is None else str(value)

	def to_remote(self, value: Any) -> Any:
		if self.kind == KIND_DATETIME:
			return format_date(value) if isinstance(value, datetime) else value
		if self.kind == KIND_ID_LIST:
			return ",".join(coerce_id_list(value))
		if self.kind == KIND_REF:
			return coerce_ref(value)
		return value


@dataclass(frozen=True)
class TableSpec:
	"""How one record type is stored."""
	table: str
	model: Type
	label: str
	fields: Tuple[FieldSpec, ...]
	order_by: Optional[Tuple[str, str]] = None
	# Newest records first in the in-memory list
	prepend_new: bool = False

	@property
	def columns(self) -> List[str]:
		return [spec.column for spec in self.fields]

	@property
	def attrs(self) -> Tuple[str, ...]:
		return field_names(self.model)

	def field(self, attr: str) -> FieldSpec:
		for spec in self.fields:
			if spec.attr == attr:
				return spec
		raise ScholarSyncDataError(f"{self.label} has no field {attr!r}")

	def check_fields(self, values: Dict[str, Any]) -> None:
		"""Reject attribute names the record type does not have."""
		unknown = sorted(set(values) - set(self.attrs))
		if unknown:
			raise ScholarSyncDataError(f"Unknown {self.label} field(s): {', '.join(unknown)}")

	def record_from_row(self, row: Dict[str, Any]):
		"""Build a record from a remote row keyed by column name."""
		if not isinstance(row, dict):
			raise ScholarSyncDataError(f"Expected a {self.label} row, got {type(row).__name__}")
		record_id = coerce_ref(row.get(ID_COLUMN, row.get("id")))
		if record_id is None:
			raise ScholarSyncDataError(f"{self.label} row has no {ID_COLUMN}")
		values = {spec.attr: spec.to_python(row.get(spec.column)) for spec in self.fields}
		return self.model(id=record_id, **values)

	def row_from_fields(self, values: Dict[str, Any]) -> Dict[str, Any]:
		"""Map the given attributes (and only those) to remote columns."""
		self.check_fields(values)
		row = {}
		for attr, value in values.items():
			if attr == "id":
				continue
			spec = self.field(attr)
			row[spec.column] = spec.to_remote(value)
		return row

	def record_from_fixture(self, raw: Dict[str, Any]):
		"""Build a record from a fixture entry keyed by camelCase attribute."""
		values = {camel_to_snake(key): value for key, value in raw.items()}
		record_id = coerce_ref(values.pop("id", None))
		if record_id is None:
			raise ScholarSyncDataError(f"{self.label} fixture has no id")
		self.check_fields(values)
		for attr in list(values):
			values[attr] = self.field(attr).to_python(values[attr])
		try:
			return self.model(id=record_id, **values)
		except TypeError as err:
			raise ScholarSyncDataError(f"Incomplete {self.label} fixture {record_id}: {err}") from err


STUDENT_TABLE = TableSpec(
	table=TABLE_STUDENTS,
	model=Student,
	label="Student",
	fields=(
		FieldSpec("first_name", "first_name"),
		FieldSpec("last_name", "last_name"),
		FieldSpec("grade", "grade", KIND_INT),
		FieldSpec("email", "email"),
		FieldSpec("phone", "phone"),
		FieldSpec("parent_contact", "parent_contact"),
		FieldSpec("enrollment_date", "enrollment_date", KIND_DATETIME),
	),
)

CLASS_TABLE = TableSpec(
	table=TABLE_CLASSES,
	model=ClassSection,
	label="Class",
	fields=(
		FieldSpec("name", "Name"),
		FieldSpec("subject", "subject"),
		FieldSpec("period", "period", KIND_INT),
		FieldSpec("room", "room"),
		FieldSpec("student_ids", "student_ids", KIND_ID_LIST),
		FieldSpec("teacher_id", "teacher_id", KIND_REF),
	),
)

ATTENDANCE_TABLE = TableSpec(
	table=TABLE_ATTENDANCE,
	model=AttendanceRecord,
	label="Attendance record",
	fields=(
		FieldSpec("student_id", "student_id", KIND_REF),
		FieldSpec("class_id", "class_id", KIND_REF),
		FieldSpec("date", "date", KIND_DATETIME),
		FieldSpec("status", "status"),
		FieldSpec("notes", "notes"),
	),
)

GRADE_TABLE = TableSpec(
	table=TABLE_GRADES,
	model=Grade,
	label="Grade",
	fields=(
		FieldSpec("student_id", "student_id", KIND_REF),
		FieldSpec("class_id", "class_id", KIND_REF),
		FieldSpec("assignment_name", "assignment_name"),
		FieldSpec("score", "score", KIND_FLOAT),
		FieldSpec("max_score", "max_score", KIND_FLOAT),
		FieldSpec("date", "date", KIND_DATETIME),
	),
)

ANNOUNCEMENT_TABLE = TableSpec(
	table=TABLE_ANNOUNCEMENTS,
	model=Announcement,
	label="Announcement",
	fields=(
		FieldSpec("title", "title"),
		FieldSpec("content", "content"),
		FieldSpec("author", "author"),
		FieldSpec("audience", "audience"),
		FieldSpec("created_at", "created_at", KIND_DATETIME),
	),
	order_by=("created_at", ORDER_DESC),
	prepend_new=True,
)

TABLE_SPECS = {
	spec.table: spec
	for spec in (STUDENT_TABLE, CLASS_TABLE, ATTENDANCE_TABLE, GRADE_TABLE, ANNOUNCEMENT_TABLE)
}
