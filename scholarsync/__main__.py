#!/usr/bin/env python3
"""
ScholarSync Debug Script

Loads settings, builds the services and runs the dashboard once, printing
what the dashboard page would show.

Usage:
    python3 -m scholarsync [--backend memory|remote] [--env-file PATH]

Settings come from the environment or a .env file, e.g.:
    SCHOLARSYNC_BACKEND=remote
    SCHOLARSYNC_API_URL=https://api.example.com/v1
    SCHOLARSYNC_API_KEY=your_api_key_here
"""

import argparse
import asyncio
import logging
import sys

from .config import load_settings, setup_logging
from .const import BACKENDS
from .coordinator import DashboardCoordinator
from .exceptions import ScholarSyncConfigError
from .metrics import format_percentage
from .notifications import Notifier
from .services import build_services

_LOGGER = logging.getLogger(__name__)


def _parse_args(argv=None) -> argparse.Namespace:
	parser = argparse.ArgumentParser(prog="scholarsync", description="Print the ScholarSync dashboard")
	parser.add_argument("--backend", choices=BACKENDS, help="Backing store to use")
	parser.add_argument("--env-file", help="Path of a .env file with SCHOLARSYNC_* settings")
	parser.add_argument("--log-level", help="Logging level, e.g. DEBUG")
	return parser.parse_args(argv)


async def show_dashboard(settings) -> bool:
	"""Load the dashboard and print it."""
	notifier = Notifier()
	notifier.add_listener(lambda notification: print(f"   {notification}"))

	async with build_services(settings, notifier=notifier) as services:
		print(f"🔍 Loading dashboard ({services.backend} backend)")
		print("=" * 50)

		dashboard = DashboardCoordinator(services)
		if not await dashboard.async_refresh():
			print(f"❌ Failed to load dashboard: {dashboard.error}")
			return False

		stats = dashboard.stats
		print(f"\n👩‍🎓 Students: {stats.total_students}")
		print(f"🏫 Classes: {stats.total_classes}")
		print(f"✅ Today's attendance: {format_percentage(stats.today_attendance_rate)}")
		print(f"📊 Average grade: {format_percentage(stats.average_grade)}")

		print("\n📅 Today's schedule:")
		for class_section in dashboard.todays_schedule:
			print(f"   {class_section} ({class_section.room})")

		print("\n📢 Recent announcements:")
		for announcement in dashboard.recent_announcements:
			print(f"   {announcement}")
	return True


def main(argv=None) -> int:
	args = _parse_args(argv)
	try:
		settings = load_settings(args.env_file, backend=args.backend, log_level=args.log_level)
	except ScholarSyncConfigError as e:
		print(f"❌ {e}")
		return 2

	setup_logging(settings.log_level)
	_LOGGER.debug(f"Using the {settings.backend} backend, latency scale {settings.latency_scale}")
	return 0 if asyncio.run(show_dashboard(settings)) else 1


if __name__ == "__main__":
	sys.exit(main())
