"""Shared fixtures for the ScholarSync tests."""

import pytest

from scholarsync.config import Settings
from scholarsync.notifications import Notifier
from scholarsync.services import build_services
from scholarsync.stores import InMemoryRepository


@pytest.fixture
def notifier():
	return Notifier()


@pytest.fixture
def repository():
	"""A fresh repository seeded from the packaged fixtures."""
	return InMemoryRepository.from_fixtures()


@pytest.fixture
def services(repository, notifier):
	"""In-memory services without the simulated latency."""
	return build_services(Settings(latency_scale=0), notifier=notifier, repository=repository)
