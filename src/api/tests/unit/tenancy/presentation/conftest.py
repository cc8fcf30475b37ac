"""Fixtures for tenancy route tests."""

from __future__ import annotations

from typing import Any, Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tenancy.application.value_objects import CurrentUser


def _provide(value: Any) -> Callable[[], Any]:
    """Override returning ``value`` without exposing it as a request parameter."""

    def _dependency() -> Any:
        return value

    return _dependency


@pytest.fixture
def make_client(admin: CurrentUser) -> Callable[..., TestClient]:
    """Build a TestClient over the tenancy router with dependency overrides.

    The caller is ``admin`` unless ``user`` is given.
    """
    from tenancy.dependencies.authentication import get_current_user
    from tenancy.presentation import router
    from tenancy.presentation.errors import (
        TenancyHTTPException,
        tenancy_error_handler,
    )

    def _make(
        overrides: dict[Callable, Any], user: CurrentUser | None = None
    ) -> TestClient:
        app = FastAPI()
        app.add_exception_handler(TenancyHTTPException, tenancy_error_handler)
        app.include_router(router)

        caller = user or admin
        app.dependency_overrides[get_current_user] = lambda: caller
        for dependency, value in overrides.items():
            app.dependency_overrides[dependency] = _provide(value)
        return TestClient(app)

    return _make
