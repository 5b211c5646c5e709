"""Tests for the notification side channel."""

from scholarsync.notifications import Notifier


def test_listeners_receive_notifications():
	notifier = Notifier()
	received = []
	remove = notifier.add_listener(received.append)

	notifier.success("Student added successfully")
	remove()
	notifier.error("Failed to add student")

	assert [(n.level, n.message) for n in received] == [("success", "Student added successfully")]
	assert [n.message for n in notifier.errors()] == ["Failed to add student"]


def test_broken_listener_does_not_stop_others():
	notifier = Notifier()
	received = []

	def broken(notification):
		raise RuntimeError("listener crashed")

	notifier.add_listener(broken)
	notifier.add_listener(received.append)
	notifier.info("Hello")

	assert len(received) == 1


def test_history_is_bounded():
	notifier = Notifier(history_size=2)
	for i in range(3):
		notifier.info(str(i))

	assert [n.message for n in notifier.history] == ["1", "2"]
	notifier.clear()
	assert list(notifier.history) == []
