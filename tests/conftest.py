"""Shared pytest fixtures."""

from __future__ import annotations

import os

import pytest
import structlog

from tokenest.config import get_settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    for name in list(os.environ):
        if name.startswith("TOKENEST_"):
            monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the tests.
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    # configure_logging binds the current (captured) stderr.
    structlog.reset_defaults()
