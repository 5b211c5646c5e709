"""Form schemas checked before anything is sent to a service."""

import logging
from typing import Any, Dict

import voluptuous as vol

from .const import ATTENDANCE_STATUSES, AUDIENCE_ALL, AUDIENCES, DEFAULT_AUTHOR
from .exceptions import ScholarSyncDataError

_LOGGER = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Please fill all required fields"

_NON_EMPTY_TEXT = vol.All(str, vol.Strip, vol.Length(min=1))


def _build_schema(fields: dict) -> vol.Schema:
	"""Form schemas drop anything the form does not know about."""
	return vol.Schema(fields, extra=vol.REMOVE_EXTRA)


STUDENT_FORM_SCHEMA = _build_schema({
	vol.Required("first_name"): _NON_EMPTY_TEXT,
	vol.Required("last_name"): _NON_EMPTY_TEXT,
	vol.Required("grade"): vol.All(vol.Coerce(int), vol.Range(min=0)),
	vol.Required("email"): _NON_EMPTY_TEXT,
	vol.Optional("phone", default=""): vol.All(str, vol.Strip),
	vol.Optional("parent_contact", default=""): vol.All(str, vol.Strip),
})

GRADE_FORM_SCHEMA = _build_schema({
	vol.Required("student_id"): vol.All(vol.Coerce(str), vol.Length(min=1)),
	vol.Required("assignment_name"): _NON_EMPTY_TEXT,
	vol.Required("score"): vol.All(vol.Coerce(float), vol.Range(min=0)),
	vol.Optional("max_score", default=100.0): vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False)),
})

ANNOUNCEMENT_FORM_SCHEMA = _build_schema({
	vol.Required("title"): _NON_EMPTY_TEXT,
	vol.Required("content"): _NON_EMPTY_TEXT,
	vol.Optional("author", default=DEFAULT_AUTHOR): _NON_EMPTY_TEXT,
	vol.Optional("audience", default=AUDIENCE_ALL): vol.All(str, vol.Lower, vol.In(AUDIENCES)),
})

ATTENDANCE_STATUS_SCHEMA = vol.Schema(vol.All(str, vol.Lower, vol.In(ATTENDANCE_STATUSES)))


def _is_blank(value: Any) -> bool:
	return value is None or (isinstance(value, str) and not value.strip())


def validate_form(schema: vol.Schema, data: Dict[str, Any]) -> Dict[str, Any]:
	"""Run form input through a schema.

	Args:
		schema: One of the *_FORM_SCHEMA objects
		data: Raw form values

	Returns:
		Cleaned values, coerced to the types the services expect

	Raises:
		ScholarSyncDataError: if a required field is empty or a value is invalid
	"""
	values = dict(data)
	try:
		return schema(values)
	except vol.MultipleInvalid as err:
		_LOGGER.debug(f"Form rejected: {err}")
		for error in err.errors:
			key = error.path[0] if error.path else None
			if isinstance(error, vol.RequiredFieldInvalid) or _is_blank(values.get(key)):
				raise ScholarSyncDataError(REQUIRED_FIELDS_MESSAGE) from err
		raise ScholarSyncDataError(f"Invalid form input: {err}") from err


def validate_status(status: str) -> str:
	"""Normalise an attendance status, rejecting unknown ones."""
	try:
		return ATTENDANCE_STATUS_SCHEMA(status)
	except vol.Invalid as err:
		raise ScholarSyncDataError(f"Unknown attendance status: {status!r}") from err
