"""Tests for the data-access services."""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from scholarsync.config import Settings
from scholarsync.exceptions import ScholarSyncConnectionError, ScholarSyncNotFoundError
from scholarsync.services import build_services
from scholarsync.stores import MemoryRecordStore, RemoteRecordStore

NEW_RECORDS = {
	"students": {"first_name": "Mia", "last_name": "Garcia", "grade": 9, "email": "mia.garcia@school.edu"},
	"classes": {"name": "Chemistry", "subject": "Science", "period": 6, "room": "Lab 1"},
	"attendance": {
		"student_id": "5",
		"class_id": "4",
		"date": datetime.fromisoformat("2024-09-18T08:00:00+00:00"),
		"status": "late",
	},
	"grades": {"student_id": "4", "class_id": "1", "assignment_name": "Quiz 2", "score": 70, "max_score": 80},
	"announcements": {"title": "Picture Day", "content": "Smile!"},
}


@pytest.mark.parametrize("entity", sorted(NEW_RECORDS))
async def test_create_then_get_by_id_round_trips(services, entity):
	service = getattr(services, entity)
	created = await service.create(dict(NEW_RECORDS[entity]))
	assert await service.get_by_id(created.id) == created


@pytest.mark.parametrize("entity", sorted(NEW_RECORDS))
async def test_delete_then_get_by_id_is_not_found(services, entity):
	service = getattr(services, entity)
	record = (await service.get_all())[0]
	await service.delete(record.id)
	with pytest.raises(ScholarSyncNotFoundError):
		await service.get_by_id(record.id)


async def test_student_defaults(services):
	student = await services.students.create(dict(NEW_RECORDS["students"]))
	assert student.phone == ""
	assert student.parent_contact == ""
	assert student.enrollment_date.tzinfo is not None


async def test_class_defaults(services):
	cls = await services.classes.create(dict(NEW_RECORDS["classes"]))
	assert cls.student_ids == []
	assert cls.teacher_id is None


async def test_grade_date_defaults_to_now(services):
	grade = await services.grades.create(dict(NEW_RECORDS["grades"]))
	assert isinstance(grade.date, datetime)


async def test_given_values_win_over_defaults(services):
	announcement = await services.announcements.create({
		"title": "Staff Meeting",
		"content": "Library, 3pm",
		"author": "Vice Principal Chen",
		"audience": "staff",
	})
	assert announcement.author == "Vice Principal Chen"
	assert announcement.audience == "staff"


async def test_announcements_are_newest_first(services):
	titles = [a.title for a in await services.announcements.get_all()]
	assert titles == ["Parent-Teacher Conferences", "Staff Meeting", "Science Fair Registration", "Welcome Back!"]

	created = await services.announcements.create(dict(NEW_RECORDS["announcements"]))
	assert (await services.announcements.get_all())[0].id == created.id


async def test_update_only_changes_given_field(services):
	before = await services.classes.get_by_id("1")
	after = await services.classes.update("1", {"room": "Room 102"})
	assert after.room == "Room 102"
	assert (after.name, after.period, after.student_ids) == (before.name, before.period, before.student_ids)


async def test_get_all_twice_is_equal(services):
	first = await services.grades.get_all()
	await services.students.get_all()
	assert await services.grades.get_all() == first


def test_memory_backend_is_the_default(services):
	assert services.backend == "memory"
	assert services.client is None
	assert isinstance(services.students._store, MemoryRecordStore)


async def test_remote_backend(notifier):
	client = AsyncMock()
	settings = Settings(backend="remote", api_url="https://api.example.com/v1")

	async with build_services(settings, notifier=notifier, client=client) as services:
		assert services.client is client
		assert isinstance(services.grades._store, RemoteRecordStore)

	client.__aenter__.assert_awaited_once()
	client.close.assert_awaited_once()


async def test_failed_announcement_load_keeps_error(notifier):
	client = AsyncMock()
	client.fetch_records.side_effect = ScholarSyncConnectionError("offline")
	settings = Settings(backend="remote", api_url="https://api.example.com/v1")
	services = build_services(settings, notifier=notifier, client=client)

	announcements = await services.announcements.get_all()

	assert announcements.failed
	assert announcements.error == "offline"


async def test_remote_services_used_without_async_with_report_why(notifier):
	settings = Settings(backend="remote", api_url="https://api.example.com/v1")
	services = build_services(settings, notifier=notifier)

	students = await services.students.get_all()

	assert students.failed
	assert "async with" in students.error
	assert "async with" in notifier.errors()[0].message
