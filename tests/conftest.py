"""Shared pytest fixtures: isolated storage directories per test."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from applications_api.config import Settings
from applications_api.excel_db import ExcelAppendStore
from applications_api.main import create_app


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(storage_dir=str(tmp_path))


@pytest.fixture
def store(settings: Settings) -> ExcelAppendStore:
    return ExcelAppendStore(settings.workbook_path)


@pytest.fixture
def client(settings: Settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client
