"""Data models for ScholarSync entities."""

from dataclasses import MISSING, dataclass, field, fields
from datetime import date, datetime
from typing import List, Optional, Tuple

from .const import AUDIENCE_ALL, DEFAULT_AUTHOR


@dataclass
class Student:
	"""A student enrolled in the school."""
	id: str
	first_name: str
	last_name: str
	grade: int  # year level
	email: str
	phone: str = ""
	parent_contact: str = ""
	enrollment_date: Optional[datetime] = None

	@property
	def full_name(self) -> str:
		return f"{self.first_name} {self.last_name}"

	def __str__(self) -> str:
		return f"{self.full_name} (grade {self.grade})"


@dataclass
class ClassSection:
	"""A class taught in one period, with its roster of student ids."""
	id: str
	name: str
	subject: str
	period: int
	room: str
	student_ids: List[str] = field(default_factory=list)
	teacher_id: Optional[str] = None

	def __str__(self) -> str:
		return f"{self.name} - Period {self.period}"


@dataclass
class AttendanceRecord:
	"""Attendance of one student in one class on one day."""
	id: str
	student_id: str
	class_id: str
	date: datetime
	status: str  # "present", "absent", "late"
	notes: str = ""

	@property
	def day(self) -> date:
		"""Calendar day the record belongs to."""
		return self.date.date()


@dataclass
class Grade:
	"""A score on one assignment."""
	id: str
	student_id: str
	class_id: str
	assignment_name: str
	score: float
	max_score: float
	date: Optional[datetime] = None

	@property
	def percentage(self) -> float:
		"""Fraction of the maximum score achieved (not clamped to 1)."""
		return self.score / self.max_score

	def __str__(self) -> str:
		return f"{self.assignment_name}: {self.score:g}/{self.max_score:g}"


@dataclass
class Announcement:
	"""A school announcement."""
	id: str
	title: str
	content: str
	author: str = DEFAULT_AUTHOR
	audience: str = AUDIENCE_ALL  # "all", "students", "staff", "parents"
	created_at: Optional[datetime] = None

	def __str__(self) -> str:
		if self.created_at:
			return f"{self.title} - {self.created_at.strftime('%Y-%m-%d')}"
		return self.title


class RecordList(list):
	"""Records returned by a fetch.

	``error`` is set when the fetch failed and the list is empty because of it,
	so callers can tell a failed load from an empty table.
	"""

	def __init__(self, records=(), error: Optional[str] = None):
		super().__init__(records)
		self.error = error

	@property
	def failed(self) -> bool:
		return self.error is not None


def field_names(model) -> Tuple[str, ...]:
	"""Attribute names of a record type, id first."""
	return tuple(f.name for f in fields(model))


def required_field_names(model) -> Tuple[str, ...]:
	"""Attributes a record type cannot be built without, excluding id."""
	return tuple(
		f.name for f in fields(model)
		if f.name != "id" and f.default is MISSING and f.default_factory is MISSING
	)
