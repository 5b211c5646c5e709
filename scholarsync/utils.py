"""Small conversion helpers shared by the stores and metrics."""

import logging
import math
import re
from datetime import date, datetime, timezone
from typing import Any, Optional, Union

_LOGGER = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Formats the fixtures and the remote store have been seen to use
DATE_FORMATS = [
	"%Y-%m-%dT%H:%M:%S.%fZ",
	"%Y-%m-%dT%H:%M:%SZ",
	"%Y-%m-%dT%H:%M:%S.%f",
	"%Y-%m-%dT%H:%M:%S",
	"%Y-%m-%d %H:%M:%S",
	"%Y-%m-%d",
	"%d/%m/%Y",
]


def utcnow() -> datetime:
	"""Current time as an aware UTC datetime."""
	return datetime.now(timezone.utc)


def parse_date(value: Any) -> Optional[datetime]:
	"""Parse a timestamp from the stores into an aware UTC datetime.

	Args:
		value: ISO-8601 string, datetime, date or None

	Returns:
		datetime object, or None when the value is empty or cannot be parsed
	"""
	if value is None or value == "":
		return None
	if isinstance(value, datetime):
		return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
	if isinstance(value, date):
		return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

	text = str(value).strip()
	try:
		parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
	except ValueError:
		parsed = None

	if parsed is None:
		for fmt in DATE_FORMATS:
			try:
				parsed = datetime.strptime(text, fmt)
				break
			except ValueError:
				continue

	if parsed is None:
		_LOGGER.warning(f"Failed to parse date: {value!r}")
		return None

	if parsed.tzinfo is None:
		parsed = parsed.replace(tzinfo=timezone.utc)
	return parsed.astimezone(timezone.utc)


def to_day(value: Union[date, datetime, str]) -> date:
	"""Reduce a day, timestamp or 'YYYY-MM-DD' string to a calendar day."""
	if isinstance(value, datetime):
		return value.date()
	if isinstance(value, date):
		return value
	parsed = parse_date(value)
	if parsed is None:
		raise ValueError(f"Not a valid day: {value!r}")
	return parsed.date()


def format_date(value: Optional[datetime]) -> Optional[str]:
	"""ISO-8601 text for a timestamp, as the stores expect it."""
	if value is None:
		return None
	return value.isoformat()


def round_half_up(value: float) -> int:
	"""Round halves up (2.5 -> 3) instead of to the nearest even number."""
	return int(math.floor(value + 0.5))


def camel_to_snake(name: str) -> str:
	"""'parentContact' -> 'parent_contact'."""
	return _CAMEL_BOUNDARY.sub("_", name).lower()
