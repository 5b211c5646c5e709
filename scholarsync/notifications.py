"""Fire-and-forget notification side channel.

Stores and coordinators report outcomes here instead of raising when the
caller should keep going (failed list fetches, rejected batch entries,
mutation results). Whatever renders them subscribes with ``add_listener``.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Deque, List, Optional

from .const import LEVEL_ERROR, LEVEL_INFO, LEVEL_SUCCESS, NOTIFICATION_HISTORY_SIZE
from .utils import utcnow

_LOGGER = logging.getLogger(__name__)

Listener = Callable[["Notification"], None]


@dataclass
class Notification:
	"""One message for the user."""
	level: str  # "success", "error", "info"
	message: str
	created_at: datetime = field(default_factory=utcnow)

	def __str__(self) -> str:
		return f"[{self.level}] {self.message}"


class Notifier:
	"""Dispatch notifications to listeners and keep a short history."""

	def __init__(self, history_size: int = NOTIFICATION_HISTORY_SIZE) -> None:
		self._listeners: List[Listener] = []
		self.history: Deque[Notification] = deque(maxlen=history_size)

	def add_listener(self, listener: Listener) -> Callable[[], None]:
		"""Subscribe to notifications; returns a callable that unsubscribes."""
		self._listeners.append(listener)

		def remove_listener() -> None:
			if listener in self._listeners:
				self._listeners.remove(listener)

		return remove_listener

	def success(self, message: str) -> Notification:
		return self._notify(LEVEL_SUCCESS, message)

	def error(self, message: str) -> Notification:
		return self._notify(LEVEL_ERROR, message)

	def info(self, message: str) -> Notification:
		return self._notify(LEVEL_INFO, message)

	def errors(self) -> List[Notification]:
		"""Error notifications still in the history, oldest first."""
		return [n for n in self.history if n.level == LEVEL_ERROR]

	def clear(self) -> None:
		self.history.clear()

	def _notify(self, level: str, message: str) -> Notification:
		notification = Notification(level=level, message=message)
		if level == LEVEL_ERROR:
			_LOGGER.warning(f"Notify {level}: {message}")
		else:
			_LOGGER.debug(f"Notify {level}: {message}")

		self.history.append(notification)
		for listener in list(self._listeners):
			try:
				listener(notification)
			except Exception as e:
				# A broken listener must not break the operation that notified
				_LOGGER.error(f"Notification listener failed: {e}")
		return notification


def get_notifier(notifier: Optional[Notifier] = None) -> Notifier:
	"""Return the given notifier, or a fresh one."""
	return notifier if notifier is not None else Notifier()
