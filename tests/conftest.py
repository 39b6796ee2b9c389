"""Shared fixtures for provisioner tests."""

from unittest.mock import MagicMock

import pytest

from libs.vault_namespace.plan import build_plan
from libs.vault_namespace.policy import load_policy_template


@pytest.fixture(autouse=True)
def fast_retry_sleep(monkeypatch):
    """Eliminate retry backoff delays in tests to keep the suite fast."""
    monkeypatch.setattr("tenacity.nap.sleep", lambda *args, **kwargs: None)
    monkeypatch.setattr("tenacity.nap.time.sleep", lambda *args, **kwargs: None)


@pytest.fixture()
def default_template() -> str:
    return load_policy_template()


@pytest.fixture()
def sample_plan(default_template):
    """Plan for my-app under production/acme."""
    return build_plan(
        "production/acme/my-app",
        "my-app",
        policy_template=default_template,
    )


@pytest.fixture()
def mock_hvac_client():
    """Create a mock hvac client with an empty Vault behind it."""
    client = MagicMock()
    client.is_authenticated.return_value = True
    client.sys.list_namespaces.return_value = {"data": {"keys": []}}
    client.sys.list_mounted_secrets_engines.return_value = {
        "data": {"cubbyhole/": {}, "identity/": {}, "sys/": {}}
    }
    client.sys.list_auth_methods.return_value = {"data": {"token/": {}}}
    client.auth.approle.read_role_id.return_value = {"data": {"role_id": "role-id-123"}}
    client.auth.approle.generate_secret_id.return_value = {
        "data": {"secret_id": "secret-id-456", "secret_id_accessor": "accessor-789"}
    }
    return client
