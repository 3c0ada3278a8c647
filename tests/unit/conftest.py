"""Shared fixtures for unit tests."""

from __future__ import annotations

import pytest

from helpers import BASE_URL, DATASOURCE_UID, FakeTransport
from piweb.datasource.core import DataSourceSettings


@pytest.fixture
def settings() -> DataSourceSettings:
    return DataSourceSettings(url=BASE_URL, uid=DATASOURCE_UID, max_concurrency=4)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
