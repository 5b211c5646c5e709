"""Page coordinators: per-page state on top of the services.

A coordinator owns private copies of the collections its page shows. It
moves through idle -> loading -> ready | error on every refresh, and applies
mutations fire-and-confirm: the local copy is patched only after the service
call succeeds, and a failed call leaves it untouched.
"""

import asyncio
import inspect
import logging
from datetime import date, datetime, time, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import voluptuous as vol

from . import metrics
from .const import (
	ATTENDANCE_HOUR,
	DASHBOARD_ANNOUNCEMENT_COUNT,
	DASHBOARD_SCHEDULE_SIZE,
	STATE_ERROR,
	STATE_IDLE,
	STATE_LOADING,
	STATE_READY,
	STATUS_PRESENT,
)
from .exceptions import ScholarSyncConnectionError, ScholarSyncDataError, ScholarSyncError
from .filters import class_periods, filter_announcements, filter_classes, filter_students, grade_levels
from .forms import (
	ANNOUNCEMENT_FORM_SCHEMA,
	GRADE_FORM_SCHEMA,
	STUDENT_FORM_SCHEMA,
	validate_form,
	validate_status,
)
from .models import Announcement, AttendanceRecord, ClassSection, Grade, Student
from .services import EntityService, SchoolServices
from .utils import to_day, utcnow

_LOGGER = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], Union[bool, Awaitable[bool]]]


class PageCoordinator:
	"""Shared load/error/form handling for one page."""

	title = "data"

	def __init__(self, services: SchoolServices, confirm: Optional[ConfirmCallback] = None) -> None:
		"""Initialise coordinator.

		Args:
			services: The data-access services
			confirm: Asked before destructive actions; may be sync or async.
				Without one, destructive actions are refused.
		"""
		self.services = services
		self.notifier = services.notifier
		self._confirm = confirm
		self.state = STATE_IDLE
		self.error: Optional[str] = None
		self.form_open = False

	@property
	def is_ready(self) -> bool:
		return self.state == STATE_READY

	@property
	def is_loading(self) -> bool:
		return self.state == STATE_LOADING

	def open_form(self) -> None:
		self.form_open = True

	def close_form(self) -> None:
		self.form_open = False

	async def async_refresh(self) -> bool:
		"""(Re)load the page; used on mount and for "try again".

		Returns:
			True if the page reached the ready state
		"""
		self.state = STATE_LOADING
		self.error = None
		try:
			await self._async_load_data()
		except ScholarSyncError as err:
			self.state = STATE_ERROR
			self.error = str(err) or f"Failed to load {self.title}"
			_LOGGER.warning(f"Failed to load {self.title}: {self.error}")
			self.notifier.error(f"Failed to load {self.title}")
			return False

		self.state = STATE_READY
		return True

	async def _async_load_data(self) -> None:
		raise NotImplementedError

	async def _async_fetch(self, *services: EntityService) -> List[List[Any]]:
		"""Fetch several collections concurrently; one failed fetch fails them all."""
		results = await asyncio.gather(*(service.get_all() for service in services))
		errors = [result.error for result in results if result.failed]
		if errors:
			raise ScholarSyncConnectionError("; ".join(errors))
		return [list(result) for result in results]

	async def _async_confirm(self, prompt: str) -> bool:
		if self._confirm is None:
			_LOGGER.warning(f"No confirmation handler, refusing: {prompt}")
			return False
		answer = self._confirm(prompt)
		if inspect.isawaitable(answer):
			answer = await answer
		return bool(answer)

	async def _async_run(self, action: Awaitable, success_message: str, failure_message: str):
		"""Await a service call and notify its outcome.

		Returns:
			The call's result, or None if it failed
		"""
		try:
			result = await action
		except ScholarSyncError as err:
			_LOGGER.warning(f"{failure_message}: {err}")
			self.notifier.error(failure_message)
			return None
		self.notifier.success(success_message)
		return result

	def _validate(self, schema: vol.Schema, form: Dict[str, Any]) -> Optional[Dict[str, Any]]:
		try:
			return validate_form(schema, form)
		except ScholarSyncDataError as err:
			self.notifier.error(str(err))
			return None


class StudentsCoordinator(PageCoordinator):
	"""Student roster with search and grade-level filter."""

	title = "students"

	def __init__(self, services: SchoolServices, confirm: Optional[ConfirmCallback] = None) -> None:
		super().__init__(services, confirm)
		self.students: List[Student] = []
		self.search_term = ""
		self.grade_filter: Optional[int] = None

	async def _async_load_data(self) -> None:
		(self.students,) = await self._async_fetch(self.services.students)

	@property
	def filtered_students(self) -> List[Student]:
		return filter_students(self.students, self.search_term, self.grade_filter)

	@property
	def grade_levels(self) -> List[int]:
		return grade_levels(self.students)

	async def async_add_student(self, form: Dict[str, Any]) -> Optional[Student]:
		values = self._validate(STUDENT_FORM_SCHEMA, form)
		if values is None:
			return None
		student = await self._async_run(
			self.services.students.create(values),
			"Student added successfully",
			"Failed to add student",
		)
		if student is not None:
			self.students.append(student)
			self.close_form()
		return student

	async def async_delete_student(self, student_id: str) -> bool:
		if not await self._async_confirm("Are you sure you want to delete this student?"):
			return False
		deleted = await self._async_run(
			self.services.students.delete(student_id),
			"Student deleted successfully",
			"Failed to delete student",
		)
		if not deleted:
			return False
		self.students = [s for s in self.students if s.id != student_id]
		return True


class ClassesCoordinator(PageCoordinator):
	"""Class schedule with rosters, filterable by period."""

	title = "classes"

	def __init__(self, services: SchoolServices, confirm: Optional[ConfirmCallback] = None) -> None:
		super().__init__(services, confirm)
		self.classes: List[ClassSection] = []
		self.students: List[Student] = []
		self.selected_period: Optional[int] = None

	async def _async_load_data(self) -> None:
		self.classes, self.students = await self._async_fetch(self.services.classes, self.services.students)

	@property
	def filtered_classes(self) -> List[ClassSection]:
		return filter_classes(self.classes, self.selected_period)

	@property
	def periods(self) -> List[int]:
		return class_periods(self.classes)

	def class_students(self, class_section: ClassSection) -> List[Student]:
		return metrics.roster_students(class_section, self.students)


class AttendanceCoordinator(PageCoordinator):
	"""Attendance sheet for one class on one day."""

	title = "attendance"

	def __init__(
		self,
		services: SchoolServices,
		confirm: Optional[ConfirmCallback] = None,
		selected_date: Optional[Union[date, str]] = None,
	) -> None:
		super().__init__(services, confirm)
		self.classes: List[ClassSection] = []
		self.students: List[Student] = []
		self.records: List[AttendanceRecord] = []
		self.selected_class: Optional[ClassSection] = None
		self.selected_date: date = to_day(selected_date) if selected_date else utcnow().date()

	async def _async_load_data(self) -> None:
		self.classes, self.students = await self._async_fetch(self.services.classes, self.services.students)
		if self.selected_class is not None:
			self.selected_class = self._find_class(self.selected_class.id)
		if self.selected_class is None and self.classes:
			self.selected_class = self.classes[0]
		await self._async_load_attendance()

	async def _async_load_attendance(self) -> None:
		if self.selected_class is None:
			self.records = []
			return
		records = await self.services.attendance.get_all()
		if records.failed:
			# The sheet stays usable with what it had
			self.notifier.error("Failed to load attendance data")
			return
		self.records = metrics.records_for_class_day(records, self.selected_class.id, self.selected_date)

	def _find_class(self, class_id: Optional[str]) -> Optional[ClassSection]:
		return next((cls for cls in self.classes if cls.id == class_id), None)

	async def async_select_class(self, class_id: Optional[str]) -> None:
		self.selected_class = self._find_class(class_id)
		await self._async_load_attendance()

	async def async_select_date(self, day: Union[date, str]) -> None:
		self.selected_date = to_day(day)
		await self._async_load_attendance()

	@property
	def class_students(self) -> List[Student]:
		return metrics.roster_students(self.selected_class, self.students)

	@property
	def summary(self) -> metrics.AttendanceSummary:
		return metrics.attendance_summary(self.class_students, self.records)

	def student_attendance(self, student_id: str) -> Optional[AttendanceRecord]:
		return metrics.find_student_attendance(self.records, student_id, self.selected_date)

	def _record_timestamp(self) -> datetime:
		return datetime.combine(self.selected_date, time(hour=ATTENDANCE_HOUR), tzinfo=timezone.utc)

	async def async_mark_attendance(self, student_id: str, status: str) -> Optional[AttendanceRecord]:
		"""Set a student's status for the selected class and day.

		Updates the student's existing record for the day if there is one,
		otherwise creates it, so there is at most one record per student.
		"""
		try:
			status = validate_status(status)
		except ScholarSyncDataError as err:
			self.notifier.error(str(err))
			return None
		if self.selected_class is None:
			self.notifier.error("Select a class to take attendance")
			return None

		existing = self.student_attendance(student_id)
		if existing is not None:
			action = self.services.attendance.update(existing.id, {"status": status})
		else:
			action = self.services.attendance.create({
				"student_id": student_id,
				"class_id": self.selected_class.id,
				"date": self._record_timestamp(),
				"status": status,
				"notes": "",
			})

		record = await self._async_run(action, f"Attendance marked as {status}", "Failed to mark attendance")
		if record is None:
			return None
		if existing is not None:
			self.records = [record if r.id == record.id else r for r in self.records]
		else:
			self.records.append(record)
		return record

	async def async_mark_all_present(self) -> bool:
		"""Mark the roster present one student at a time.

		Stops at the first failure; students already marked stay marked.
		"""
		for student in self.class_students:
			if await self.async_mark_attendance(student.id, STATUS_PRESENT) is None:
				self.notifier.error("Failed to mark all present")
				return False
		self.notifier.success("All students marked present")
		return True


class GradesCoordinator(PageCoordinator):
	"""Grade book of one class."""

	title = "grades"

	def __init__(self, services: SchoolServices, confirm: Optional[ConfirmCallback] = None) -> None:
		super().__init__(services, confirm)
		self.classes: List[ClassSection] = []
		self.students: List[Student] = []
		self.grades: List[Grade] = []
		self.selected_class: Optional[ClassSection] = None

	async def _async_load_data(self) -> None:
		self.classes, self.students = await self._async_fetch(self.services.classes, self.services.students)
		if self.selected_class is not None:
			self.selected_class = next((c for c in self.classes if c.id == self.selected_class.id), None)
		if self.selected_class is None and self.classes:
			self.selected_class = self.classes[0]
		await self._async_load_grades()

	async def _async_load_grades(self) -> None:
		if self.selected_class is None:
			self.grades = []
			return
		grades = await self.services.grades.get_all()
		if grades.failed:
			self.notifier.error("Failed to load grades")
			return
		self.grades = [grade for grade in grades if grade.class_id == self.selected_class.id]

	async def async_select_class(self, class_id: Optional[str]) -> None:
		self.selected_class = next((c for c in self.classes if c.id == class_id), None)
		await self._async_load_grades()

	@property
	def class_students(self) -> List[Student]:
		return metrics.roster_students(self.selected_class, self.students)

	def student_grades(self, student_id: str) -> List[Grade]:
		return metrics.student_grades(self.grades, student_id)

	def student_average(self, student_id: str) -> Optional[int]:
		return metrics.student_average(self.student_grades(student_id))

	def student_average_label(self, student_id: str) -> str:
		return metrics.format_percentage(self.student_average(student_id))

	def letter_grade(self, student_id: str) -> Optional[str]:
		"""Letter for a student's average, None while ungraded."""
		average = self.student_average(student_id)
		return metrics.letter_grade(average) if average is not None else None

	@property
	def class_average(self) -> Optional[int]:
		return metrics.class_average(self.class_students, self.grades)

	@property
	def assignment_count(self) -> int:
		return metrics.assignment_count(self.grades)

	async def async_add_grade(self, form: Dict[str, Any]) -> Optional[Grade]:
		if self.selected_class is None:
			self.notifier.error("Select a class to add grades")
			return None
		values = self._validate(GRADE_FORM_SCHEMA, form)
		if values is None:
			return None
		values.update({"class_id": self.selected_class.id, "date": utcnow()})
		grade = await self._async_run(
			self.services.grades.create(values),
			"Grade added successfully",
			"Failed to add grade",
		)
		if grade is not None:
			self.grades.append(grade)
			self.close_form()
		return grade

	async def async_delete_grade(self, grade_id: str) -> bool:
		if not await self._async_confirm("Are you sure you want to delete this grade?"):
			return False
		deleted = await self._async_run(
			self.services.grades.delete(grade_id),
			"Grade deleted successfully",
			"Failed to delete grade",
		)
		if not deleted:
			return False
		self.grades = [g for g in self.grades if g.id != grade_id]
		return True


class AnnouncementsCoordinator(PageCoordinator):
	"""Announcements, newest first, filterable by audience."""

	title = "announcements"

	def __init__(self, services: SchoolServices, confirm: Optional[ConfirmCallback] = None) -> None:
		super().__init__(services, confirm)
		self.announcements: List[Announcement] = []
		self.audience_filter: Optional[str] = None

	async def _async_load_data(self) -> None:
		(self.announcements,) = await self._async_fetch(self.services.announcements)

	@property
	def filtered_announcements(self) -> List[Announcement]:
		return filter_announcements(self.announcements, self.audience_filter)

	async def async_create_announcement(self, form: Dict[str, Any]) -> Optional[Announcement]:
		values = self._validate(ANNOUNCEMENT_FORM_SCHEMA, form)
		if values is None:
			return None
		announcement = await self._async_run(
			self.services.announcements.create(values),
			"Announcement created successfully",
			"Failed to create announcement",
		)
		if announcement is not None:
			self.announcements.insert(0, announcement)
			self.close_form()
		return announcement

	async def async_delete_announcement(self, announcement_id: str) -> bool:
		if not await self._async_confirm("Are you sure you want to delete this announcement?"):
			return False
		deleted = await self._async_run(
			self.services.announcements.delete(announcement_id),
			"Announcement deleted successfully",
			"Failed to delete announcement",
		)
		if not deleted:
			return False
		self.announcements = [a for a in self.announcements if a.id != announcement_id]
		return True


class DashboardCoordinator(PageCoordinator):
	"""Headline numbers, today's schedule and the latest announcements."""

	title = "dashboard data"

	def __init__(self, services: SchoolServices, today: Optional[Union[date, str]] = None) -> None:
		super().__init__(services)
		self.today: Optional[date] = to_day(today) if today else None
		self.stats = metrics.DashboardStats()
		self.todays_schedule: List[ClassSection] = []
		self.recent_announcements: List[Announcement] = []

	async def _async_load_data(self) -> None:
		students, classes, attendance, grades, announcements = await self._async_fetch(
			self.services.students,
			self.services.classes,
			self.services.attendance,
			self.services.grades,
			self.services.announcements,
		)
		today = self.today or utcnow().date()
		self.stats = metrics.DashboardStats(
			total_students=len(students),
			total_classes=len(classes),
			today_attendance_rate=metrics.daily_attendance_rate(attendance, today),
			average_grade=metrics.overall_grade_average(grades),
		)
		self.todays_schedule = classes[:DASHBOARD_SCHEDULE_SIZE]
		self.recent_announcements = announcements[:DASHBOARD_ANNOUNCEMENT_COUNT]
