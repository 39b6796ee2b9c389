"""Tests for the deployment add-on wrapper."""

import json
import stat
from pathlib import Path

import pytest
from pydantic import SecretStr

from libs.vault_namespace.addon import REDACTED, DeploymentAddon
from libs.vault_namespace.provisioner import ProvisioningResult


@pytest.fixture()
def result() -> ProvisioningResult:
    return ProvisioningResult(
        namespace_path="production/acme/my-app",
        role_name="my-app",
        role_id="role-id-123",
        secret_id=SecretStr("secret-id-456"),
        secret_id_accessor="accessor-789",
        kv_mount_path="kv",
        data_path="my-app",
        auth_path="approle",
    )


@pytest.fixture()
def addon(result) -> DeploymentAddon:
    return DeploymentAddon.from_result(
        result,
        vault_addr="https://vault.example.com:8200",
        parent_namespace="admin",
    )


class TestOutputs:
    @pytest.mark.unit()
    def test_secret_redacted_by_default(self, addon) -> None:
        assert addon.outputs() == {
            "namespace_path": "production/acme/my-app",
            "role_id": "role-id-123",
            "secret_id": REDACTED,
        }

    @pytest.mark.unit()
    def test_reveal(self, addon) -> None:
        assert addon.outputs(reveal=True)["secret_id"] == "secret-id-456"

    @pytest.mark.unit()
    def test_repr_hides_secret(self, addon) -> None:
        assert "secret-id-456" not in repr(addon)


class TestEnvironment:
    @pytest.mark.unit()
    def test_vault_namespace_includes_parent(self, addon) -> None:
        env = addon.environment()

        assert env["VAULT_NAMESPACE"] == "admin/production/acme/my-app"
        assert env["VAULT_ADDR"] == "https://vault.example.com:8200"
        assert env["VAULT_ROLE_ID"] == "role-id-123"
        assert env["VAULT_SECRET_ID"] == REDACTED
        assert env["VAULT_KV_MOUNT"] == "kv"
        assert env["VAULT_KV_PATH"] == "my-app"
        assert env["VAULT_AUTH_PATH"] == "approle"

    @pytest.mark.unit()
    def test_without_parent_namespace(self, result) -> None:
        addon = DeploymentAddon.from_result(result, vault_addr="https://vault")

        assert addon.environment()["VAULT_NAMESPACE"] == "production/acme/my-app"

    @pytest.mark.unit()
    def test_env_lines(self, addon) -> None:
        lines = addon.to_env_lines(reveal=True)

        assert "VAULT_SECRET_ID=secret-id-456" in lines
        assert all("=" in line for line in lines)

    @pytest.mark.unit()
    def test_to_json(self, addon) -> None:
        payload = json.loads(addon.to_json())

        assert payload["outputs"]["namespace_path"] == "production/acme/my-app"
        assert payload["environment"]["VAULT_SECRET_ID"] == REDACTED


class TestWriteDotenv:
    @pytest.mark.unit()
    def test_writes_revealed_env_owner_only(self, addon, tmp_path: Path) -> None:
        target = addon.write_dotenv(tmp_path / "deploy" / "vault.env")

        content = target.read_text()
        assert "VAULT_SECRET_ID=secret-id-456\n" in content
        assert content.endswith("\n")
        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    @pytest.mark.unit()
    def test_overwrites_existing_file(self, addon, tmp_path: Path) -> None:
        target = tmp_path / "vault.env"
        target.write_text("STALE=1\n")

        addon.write_dotenv(target)

        assert "STALE" not in target.read_text()
