"""Tests for the attendance and grade aggregates."""

from datetime import date, datetime, timezone

import pytest

from scholarsync.metrics import (
	assignment_count,
	attendance_summary,
	class_average,
	daily_attendance_rate,
	find_student_attendance,
	format_percentage,
	letter_grade,
	overall_grade_average,
	records_for_class_day,
	roster_students,
	student_average,
)
from scholarsync.models import AttendanceRecord, ClassSection, Grade, Student

DAY = datetime(2024, 9, 16, 8, tzinfo=timezone.utc)


def _student(student_id):
	return Student(id=student_id, first_name="S", last_name=student_id, grade=10, email=f"{student_id}@school.edu")


def _record(record_id, student_id, status, class_id="1", when=DAY):
	return AttendanceRecord(id=record_id, student_id=student_id, class_id=class_id, date=when, status=status)


def _grade(student_id, score, max_score, assignment="Quiz 1"):
	return Grade(id=f"{student_id}-{assignment}", student_id=student_id, class_id="1",
		assignment_name=assignment, score=score, max_score=max_score)


ROSTER = [_student(i) for i in ("1", "2", "3", "4")]


def test_unmarked_day():
	summary = attendance_summary(ROSTER, [])
	assert (summary.total, summary.present, summary.absent, summary.late) == (4, 0, 0, 0)
	assert summary.unmarked == 4
	assert summary.attendance_rate == 0


def test_summary_counts_only_present_towards_the_rate():
	records = [
		_record("1", "1", "present"),
		_record("2", "2", "present"),
		_record("3", "3", "absent"),
		_record("4", "4", "late"),
	]
	summary = attendance_summary(ROSTER, records)
	assert (summary.present, summary.absent, summary.late, summary.unmarked) == (2, 1, 1, 0)
	assert summary.attendance_rate == 50


def test_summary_rounds_halves_up():
	roster = [_student(str(i)) for i in range(8)]
	records = [_record(str(i), str(i), "present") for i in range(5)]
	# 5 / 8 = 62.5%
	assert attendance_summary(roster, records).attendance_rate == 63


def test_summary_of_empty_roster():
	summary = attendance_summary([], [])
	assert summary.total == 0
	assert summary.attendance_rate == 0


def test_unmarked_is_never_negative():
	records = [_record("1", "1", "present"), _record("2", "9", "present")]
	assert attendance_summary([_student("1")], records).unmarked == 0


def test_records_for_class_day():
	records = [
		_record("1", "1", "present"),
		_record("2", "1", "present", class_id="2"),
		_record("3", "1", "present", when=datetime(2024, 9, 17, 8, tzinfo=timezone.utc)),
	]
	assert [r.id for r in records_for_class_day(records, "1", date(2024, 9, 16))] == ["1"]
	assert [r.id for r in records_for_class_day(records, "1", "2024-09-17")] == ["3"]


def test_find_student_attendance():
	records = [_record("1", "1", "present"), _record("2", "2", "late")]
	assert find_student_attendance(records, "2").status == "late"
	assert find_student_attendance(records, "3") is None
	assert find_student_attendance(records, "1", date(2024, 9, 17)) is None


def test_daily_attendance_rate_across_classes():
	records = [
		_record("1", "1", "present"),
		_record("2", "2", "absent", class_id="2"),
		_record("3", "3", "present", class_id="3"),
		_record("4", "4", "absent", when=datetime(2024, 9, 17, 8, tzinfo=timezone.utc)),
	]
	assert daily_attendance_rate(records, date(2024, 9, 16)) == 67
	assert daily_attendance_rate(records, date(2024, 9, 18)) == 0


def test_student_average():
	grades = [_grade("1", 80, 100), _grade("1", 45, 50, "Homework 1")]
	average = student_average(grades)
	assert average == 85
	assert format_percentage(average) == "85%"
	assert letter_grade(average) == "B"


def test_student_without_grades():
	assert student_average([]) is None
	assert format_percentage(student_average([])) == "N/A"


@pytest.mark.parametrize(
	("percentage", "letter"),
	[(100, "A"), (90, "A"), (89.99, "B"), (80, "B"), (79, "C"), (70, "C"), (69, "D"), (60, "D"), (59, "F"), (0, "F")],
)
def test_letter_grade_boundaries(percentage, letter):
	assert letter_grade(percentage) == letter


def test_class_average_counts_ungraded_students_as_zero():
	grades = [_grade("1", 90, 100), _grade("2", 70, 100)]
	assert class_average(ROSTER[:2], grades) == 80
	assert class_average(ROSTER[:3], grades) == 53


def test_class_average_of_empty_roster():
	assert class_average([], [_grade("1", 90, 100)]) is None


def test_overall_grade_average():
	assert overall_grade_average([_grade("1", 80, 100), _grade("2", 45, 50)]) == 85
	assert overall_grade_average([]) == 0


def test_assignment_count_is_distinct_names():
	grades = [_grade("1", 1, 2), _grade("2", 1, 2), _grade("1", 1, 2, "Homework 1")]
	assert assignment_count(grades) == 2


def test_roster_students_ignores_unknown_ids():
	cls = ClassSection(id="1", name="Algebra II", subject="Math", period=1, room="101", student_ids=["1", "99"])
	assert [s.id for s in roster_students(cls, ROSTER)] == ["1"]
	assert roster_students(None, ROSTER) == []
