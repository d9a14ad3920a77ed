import os

import pytest

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend import main  # noqa: E402
from backend.core import config  # noqa: E402
from backend.services.notification import SmtpEmailClient  # noqa: E402
from backend.storage import MemoryStore  # noqa: E402


@pytest.fixture
def fresh_state(monkeypatch: pytest.MonkeyPatch):
    for name in ('store', 'email_client', 'scheduler'):
        if hasattr(main.app.state, name):
            delattr(main.app.state, name)
    monkeypatch.setattr(config, 'STORAGE_BACKEND', 'memory')
    yield main.app.state
    main.stop_scheduler()


def test_startup_builds_collaborators_without_scheduler(fresh_state, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'NOTIFICATIONS_ENABLED', False)

    main.initialize_services()

    assert isinstance(fresh_state.store, MemoryStore)
    assert isinstance(fresh_state.email_client, SmtpEmailClient)
    assert not hasattr(fresh_state, 'scheduler')


def test_startup_starts_and_shutdown_stops_scheduler(fresh_state, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'NOTIFICATIONS_ENABLED', True)

    main.initialize_services()

    scheduler = fresh_state.scheduler
    assert scheduler.running is True
    assert scheduler.store is fresh_state.store

    main.stop_scheduler()
    assert scheduler.running is False


def test_root_reports_status() -> None:
    assert main.root() == {'status': 'Weekly Agenda API Running'}
