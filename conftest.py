"""
Root conftest for all tests.

Provisioner settings are read from the environment; this ensures a developer's
shell (VAULT_ADDR, VAULT_TOKEN, VAULT_NS_*) never leaks into test runs.

IMPORTANT: This file must exist at the project root to be loaded first.
"""

import os

import pytest

_ENV_PREFIXES = ("VAULT_NS_",)
_ENV_NAMES = ("VAULT_ADDR", "VAULT_TOKEN", "VAULT_NAMESPACE", "VAULT_SKIP_VERIFY")


@pytest.fixture(autouse=True)
def _isolate_vault_environment(monkeypatch):
    """Remove Vault and provisioner variables and reset the settings cache."""
    for key in list(os.environ):
        if key.startswith(_ENV_PREFIXES) or key in _ENV_NAMES:
            monkeypatch.delenv(key, raising=False)

    from config.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
