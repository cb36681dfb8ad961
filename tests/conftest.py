"""Root conftest — isolate every test from the caller's PASSKDF_* environment."""

import os

import pytest

from passkdf.config import get_settings


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.upper().startswith("PASSKDF_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
