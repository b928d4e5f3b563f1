from __future__ import annotations

import os

import pytest

import skill_ninja.config as config_module


@pytest.fixture(autouse=True)
def isolate_settings(tmp_path, monkeypatch):
    """Ensure unit tests never read a developer's skill-ninja.yaml or SKILL_NINJA_* variables.

    Cached global settings are cleared, and the catalog storage directory points
    at a per-test temporary directory so nothing is written under the real home.
    """

    original_settings = getattr(config_module, "_settings", None)
    for key in list(os.environ):
        if key.startswith("SKILL_NINJA_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("SKILL_NINJA_CATALOG__STORAGE_DIRECTORY", str(tmp_path / ".skill-ninja-test"))
    monkeypatch.chdir(tmp_path)
    config_module._settings = None

    try:
        yield
    finally:
        config_module._settings = original_settings
