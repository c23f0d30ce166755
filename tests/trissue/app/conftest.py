"""Shared fixtures for app-level tests."""
import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from dependency_injector import providers

from trissue.app.container import Container

from tests.trissue.core.conftest import FakeLogger, FakeTracker, sample_report


def write_report(tmp_path: Path, report=None, name: str = "trivy-results.json") -> Path:
    """Write a report file and return its path."""
    path = tmp_path / name
    payload = report if report is not None else sample_report()
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _create_mocked_container(tracker: FakeTracker, logger: FakeLogger) -> Container:
    container = Container()
    container.tracker.override(providers.Object(tracker))
    container.logger.override(providers.Object(logger))
    return container


@pytest.fixture
def mocked(monkeypatch):
    """Patch the container used by the CLI and the facade with in-memory fakes."""
    state = SimpleNamespace(tracker=FakeTracker(), logger=FakeLogger())

    def create_mock_container():
        return _create_mocked_container(state.tracker, state.logger)

    monkeypatch.setattr("trissue.app.cli.Container", create_mock_container)
    monkeypatch.setattr("trissue.app.main.Container", create_mock_container)
    return state
