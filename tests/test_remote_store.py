"""Tests for the remote backing store, with a mocked API client."""

from unittest.mock import AsyncMock

import pytest

from scholarsync.exceptions import (
	ScholarSyncAPIError,
	ScholarSyncConnectionError,
	ScholarSyncDataError,
	ScholarSyncNotFoundError,
	ScholarSyncValidationError,
)
from scholarsync.mapping import ANNOUNCEMENT_TABLE, CLASS_TABLE, GRADE_TABLE, STUDENT_TABLE
from scholarsync.stores import RemoteRecordStore


def _student_row(row_id, first_name="Emma", **extra):
	row = {
		"Id": row_id,
		"first_name": first_name,
		"last_name": "Johnson",
		"grade": "10",
		"email": f"{first_name.lower()}@school.edu",
	}
	row.update(extra)
	return row


@pytest.fixture
def client():
	return AsyncMock()


@pytest.fixture
def students(client, notifier):
	return RemoteRecordStore(client, STUDENT_TABLE, notifier)


async def test_get_all_maps_rows(students, client):
	client.fetch_records.return_value = [_student_row(1), _student_row("2", "Liam", phone=None)]

	records = await students.get_all()

	assert [s.id for s in records] == ["1", "2"]
	assert records[0].grade == 10
	assert records[1].phone == ""
	client.fetch_records.assert_awaited_once_with("student", STUDENT_TABLE.columns, order_by=None)


async def test_get_all_orders_announcements_newest_first(client, notifier):
	client.fetch_records.return_value = []
	store = RemoteRecordStore(client, ANNOUNCEMENT_TABLE, notifier)

	await store.get_all()

	client.fetch_records.assert_awaited_once_with(
		"announcement",
		ANNOUNCEMENT_TABLE.columns,
		order_by=[{"field": "created_at", "direction": "DESC"}],
	)


async def test_get_all_skips_unreadable_rows(students, client):
	client.fetch_records.return_value = [_student_row(1), {"first_name": "No id"}]
	assert [s.id for s in await students.get_all()] == ["1"]


async def test_get_all_failure_returns_empty_list_and_notifies(students, client, notifier):
	client.fetch_records.side_effect = ScholarSyncConnectionError("timed out")

	records = await students.get_all()

	assert records == []
	assert records.failed
	assert records.error == "timed out"
	assert [n.message for n in notifier.errors()] == ["Failed to load students: timed out"]


async def test_get_by_id_sends_numeric_id(students, client):
	client.get_record.return_value = _student_row(5, "Ava")

	student = await students.get_by_id("5")

	assert student.first_name == "Ava"
	client.get_record.assert_awaited_once_with("student", 5, STUDENT_TABLE.columns)


async def test_get_by_id_not_found(students, client):
	client.get_record.return_value = None
	with pytest.raises(ScholarSyncNotFoundError):
		await students.get_by_id("404")


async def test_batch_create_with_one_rejected_record(students, client, notifier):
	client.create_records.return_value = [
		{"success": True, "data": _student_row(10, "Mia")},
		{"success": False, "errors": [{"fieldLabel": "Email", "message": "is required"}]},
		{"success": True, "data": _student_row(12, "Leo")},
	]
	batch = [
		{"first_name": "Mia", "last_name": "Garcia", "grade": 9, "email": "mia@school.edu"},
		{"first_name": "Zoe", "last_name": "Lee", "grade": 9, "email": ""},
		{"first_name": "Leo", "last_name": "Park", "grade": 9, "email": "leo@school.edu"},
	]

	created = await students.create_many(batch)

	assert [s.id for s in created] == ["10", "12"]
	assert [n.message for n in notifier.errors()] == ["Email: is required"]
	rows = client.create_records.await_args.args[1]
	assert rows[0] == {"first_name": "Mia", "last_name": "Garcia", "grade": 9, "email": "mia@school.edu"}


async def test_create_with_no_successes_raises(students, client, notifier):
	failure = {"success": False, "errors": [{"fieldLabel": "Grade", "message": "must be a number"}]}
	client.create_records.return_value = [failure]

	with pytest.raises(ScholarSyncValidationError) as err:
		await students.create({"first_name": "Mia", "last_name": "Garcia", "grade": "x", "email": "m@s.edu"})

	assert err.value.failures == [failure]
	assert len(notifier.errors()) == 1


async def test_update_sends_only_changed_columns(client, notifier):
	client.update_records.return_value = [{"success": True, "data": {"Id": 1, "Name": "Geometry", "period": 1}}]
	store = RemoteRecordStore(client, CLASS_TABLE, notifier)

	updated = await store.update("1", {"name": "Geometry"})

	assert updated.name == "Geometry"
	client.update_records.assert_awaited_once_with("class", [{"Name": "Geometry", "Id": 1}])


async def test_update_of_missing_record_is_not_found(students, client):
	client.update_records.return_value = [{"success": False, "message": "Record not found"}]
	with pytest.raises(ScholarSyncNotFoundError):
		await students.update("404", {"phone": ""})


async def test_delete(client, notifier):
	client.delete_records.return_value = [{"success": True}]
	store = RemoteRecordStore(client, GRADE_TABLE, notifier)

	assert await store.delete("3") is True
	client.delete_records.assert_awaited_once_with("grade", [3])


async def test_delete_many_returns_deleted_ids(client, notifier):
	client.delete_records.return_value = [{"success": True}, {"success": False, "message": "Locked"}]
	store = RemoteRecordStore(client, GRADE_TABLE, notifier)

	assert await store.delete_many(["3", "4"]) == ["3"]
	assert [n.message for n in notifier.errors()] == ["Locked"]


async def test_mutation_transport_errors_propagate(students, client):
	client.create_records.side_effect = ScholarSyncAPIError("Request failed: HTTP 500")
	with pytest.raises(ScholarSyncAPIError):
		await students.create({"first_name": "Mia", "last_name": "Garcia", "grade": 9, "email": "m@s.edu"})


async def test_get_all_with_unreadable_response_returns_empty_list(students, client, notifier):
	client.fetch_records.side_effect = ScholarSyncDataError("Got HTML instead of JSON from /tables/student/query")

	records = await students.get_all()

	assert records == []
	assert records.failed
	assert len(notifier.errors()) == 1


async def test_batch_update_with_one_rejected_record(students, client, notifier):
	client.update_records.return_value = [
		{"success": True, "data": _student_row(1, "Emma", phone="(555) 111-1111")},
		{"success": False, "errors": [{"fieldLabel": "Phone", "message": "is too long"}]},
		{"success": True, "data": _student_row(3, "Olivia", phone="(555) 333-3333")},
	]

	updated = await students.update_many([
		("1", {"phone": "(555) 111-1111"}),
		("2", {"phone": "x" * 300}),
		("3", {"phone": "(555) 333-3333"}),
	])

	assert [s.id for s in updated] == ["1", "3"]
	assert updated[1].phone == "(555) 333-3333"
	assert [n.message for n in notifier.errors()] == ["Phone: is too long"]
	rows = client.update_records.await_args.args[1]
	assert [row["Id"] for row in rows] == [1, 2, 3]
