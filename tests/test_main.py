"""Tests for the debug entry point."""

import pytest

from scholarsync.__main__ import main


@pytest.fixture(autouse=True)
def fast_settings(monkeypatch):
	monkeypatch.setenv("SCHOLARSYNC_LATENCY_SCALE", "0")
	monkeypatch.setenv("SCHOLARSYNC_BACKEND", "memory")
	monkeypatch.setenv("SCHOLARSYNC_API_URL", "")


def test_prints_dashboard(capsys):
	assert main(["--backend", "memory"]) == 0

	out = capsys.readouterr().out
	assert "Students: 8" in out
	assert "Algebra II - Period 1" in out
	assert "Parent-Teacher Conferences" in out


def test_remote_backend_without_url(capsys):
	assert main(["--backend", "remote"]) == 2
	assert "api_url" in capsys.readouterr().out
