"""Unit test fixtures."""

import pytest

from infrastructure.settings import (
    get_database_settings,
    get_ledger_settings,
    get_oidc_settings,
    get_settings,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; tests that patch env need a fresh read."""
    yield
    for getter in (
        get_settings,
        get_database_settings,
        get_ledger_settings,
        get_oidc_settings,
    ):
        getter.cache_clear()
