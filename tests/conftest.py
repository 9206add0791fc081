"""Test session configuration.

Replication settings come from the environment; this keeps a developer's
`.env` and exported `REPLICATION_*` variables from leaking into the tests.
"""

from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _isolate_replication_env(monkeypatch):
    monkeypatch.setattr(
        "photon_replication.config.load_dotenv", lambda *_args, **_kwargs: True
    )
    for name in list(os.environ):
        if name.startswith("REPLICATION_") or name == "LOG_LEVEL":
            monkeypatch.delenv(name, raising=False)


# Note: Individual tests can use the `monkeypatch` fixture to override env vars.
