"""Attendance and grade aggregates over already-loaded records."""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .const import FAILING_GRADE, LETTER_GRADE_BANDS, NOT_AVAILABLE, STATUS_ABSENT, STATUS_LATE, STATUS_PRESENT
from .models import AttendanceRecord, ClassSection, Grade, Student
from .utils import round_half_up, to_day


@dataclass
class AttendanceSummary:
	"""Counts for one class on one day."""
	total: int = 0
	present: int = 0
	absent: int = 0
	late: int = 0
	unmarked: int = 0
	attendance_rate: int = 0


@dataclass
class DashboardStats:
	total_students: int = 0
	total_classes: int = 0
	today_attendance_rate: int = 0
	average_grade: int = 0


def roster_students(class_section: Optional[ClassSection], students: Iterable[Student]) -> List[Student]:
	"""Students on a class roster; roster ids with no matching student are ignored."""
	if class_section is None:
		return []
	roster = set(class_section.student_ids)
	return [student for student in students if student.id in roster]


def records_for_class_day(records: Iterable[AttendanceRecord], class_id: str, day) -> List[AttendanceRecord]:
	day = to_day(day)
	return [record for record in records if record.class_id == class_id and record.day == day]


def find_student_attendance(
	records: Iterable[AttendanceRecord],
	student_id: str,
	day=None,
) -> Optional[AttendanceRecord]:
	"""The record of one student within records already narrowed to one class.

	Args:
		records: Attendance of a single class
		student_id: Student to look up
		day: Optional day to match; leave out when the records are already one day's

	Returns:
		The matching record, or None when the student is unmarked
	"""
	if day is not None:
		day = to_day(day)
	for record in records:
		if record.student_id == student_id and (day is None or record.day == day):
			return record
	return None


def attendance_summary(roster: Sequence[Student], records: Sequence[AttendanceRecord]) -> AttendanceSummary:
	"""Summarise one class's attendance for a day.

	The rate counts only present students, against the whole roster.
	"""
	total = len(roster)
	present = sum(1 for record in records if record.status == STATUS_PRESENT)
	absent = sum(1 for record in records if record.status == STATUS_ABSENT)
	late = sum(1 for record in records if record.status == STATUS_LATE)
	return AttendanceSummary(
		total=total,
		present=present,
		absent=absent,
		late=late,
		unmarked=max(total - len(records), 0),
		attendance_rate=round_half_up(present / total * 100) if total > 0 else 0,
	)


def daily_attendance_rate(records: Iterable[AttendanceRecord], day: date) -> int:
	"""Share of the day's records, across all classes, that are 'present'."""
	day = to_day(day)
	todays = [record for record in records if record.day == day]
	if not todays:
		return 0
	present = sum(1 for record in todays if record.status == STATUS_PRESENT)
	return round_half_up(present / len(todays) * 100)


def student_grades(grades: Iterable[Grade], student_id: str) -> List[Grade]:
	return [grade for grade in grades if grade.student_id == student_id]


def _mean_fraction(grades: Sequence[Grade]) -> float:
	return sum(grade.percentage for grade in grades) / len(grades)


def student_average(grades: Sequence[Grade]) -> Optional[int]:
	"""Rounded average percentage of one student's grades, None without grades."""
	if not grades:
		return None
	return round_half_up(_mean_fraction(grades) * 100)


def class_average(roster: Sequence[Student], grades: Sequence[Grade]) -> Optional[int]:
	"""Average of the roster's per-student averages.

	Students without grades count as 0, so they pull the class average down.
	None for an empty roster.
	"""
	if not roster:
		return None
	total = 0.0
	for student in roster:
		graded = student_grades(grades, student.id)
		if graded:
			total += _mean_fraction(graded)
	return round_half_up(total / len(roster) * 100)


def overall_grade_average(grades: Sequence[Grade]) -> int:
	"""Average percentage over every grade, 0 without grades."""
	if not grades:
		return 0
	return round_half_up(_mean_fraction(grades) * 100)


def letter_grade(percentage: float) -> str:
	for lower_bound, letter in LETTER_GRADE_BANDS:
		if percentage >= lower_bound:
			return letter
	return FAILING_GRADE


def format_percentage(value: Optional[int]) -> str:
	"""'85%', or 'N/A' when there is nothing to average."""
	if value is None:
		return NOT_AVAILABLE
	return f"{value}%"


def assignment_count(grades: Iterable[Grade]) -> int:
	"""Number of distinct assignments graded."""
	return len({grade.assignment_name for grade in grades})
