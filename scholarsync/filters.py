"""List filters behind the search boxes and dropdowns of the pages."""

from typing import Iterable, List, Optional

from .models import Announcement, ClassSection, Student


def filter_students(
	students: Iterable[Student],
	search_term: str = "",
	grade_level: Optional[int] = None,
) -> List[Student]:
	"""Students whose full name contains the search term (any case) in a grade level."""
	needle = (search_term or "").strip().lower()
	return [
		student for student in students
		if needle in student.full_name.lower()
		and (grade_level is None or student.grade == grade_level)
	]


def grade_levels(students: Iterable[Student]) -> List[int]:
	"""Distinct grade levels, ascending."""
	return sorted({student.grade for student in students})


def filter_classes(classes: Iterable[ClassSection], period: Optional[int] = None) -> List[ClassSection]:
	return [cls for cls in classes if period is None or cls.period == period]


def class_periods(classes: Iterable[ClassSection]) -> List[int]:
	"""Distinct periods, ascending."""
	return sorted({cls.period for cls in classes})


def filter_announcements(announcements: Iterable[Announcement], audience: Optional[str] = None) -> List[Announcement]:
	return [a for a in announcements if not audience or a.audience == audience]
