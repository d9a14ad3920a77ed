import os
from datetime import datetime, timedelta, timezone

import pytest

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend.core import config  # noqa: E402
from backend.core.clock import to_naive_utc, utc_now  # noqa: E402


@pytest.mark.parametrize(
    ('value', 'expected'),
    [(None, True), ('1', True), ('yes', True), (' ON ', True), ('false', False), ('0', False)],
)
def test_get_bool_parses_common_spellings(value, expected: bool) -> None:
    assert config._get_bool(value, default=True) is expected


def test_get_list_splits_comma_separated_values() -> None:
    assert config._get_list('http://a.test, http://b.test,', ['x']) == ['http://a.test', 'http://b.test']
    assert config._get_list(None, ['x']) == ['x']


def test_validate_runtime_config_rejects_unknown_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'STORAGE_BACKEND', 'redis')

    with pytest.raises(RuntimeError):
        config.validate_runtime_config()


def test_validate_runtime_config_rejects_memory_store_in_production(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'APP_ENV', 'production')
    monkeypatch.setattr(config, 'STORAGE_BACKEND', 'memory')

    with pytest.raises(RuntimeError):
        config.validate_runtime_config()


def test_to_naive_utc_converts_aware_values() -> None:
    aware = datetime(2026, 1, 5, 10, 0, tzinfo=timezone(timedelta(hours=-5)))

    assert to_naive_utc(aware) == datetime(2026, 1, 5, 15, 0)
    assert to_naive_utc(datetime(2026, 1, 5, 10, 0)) == datetime(2026, 1, 5, 10, 0)
    assert to_naive_utc(None) is None


def test_utc_now_is_naive() -> None:
    assert utc_now().tzinfo is None
