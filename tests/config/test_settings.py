"""Tests for config/settings.py."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from config.settings import Settings, get_settings
from libs.vault_namespace.inputs import ScopingStrategy


class TestSettingsFromEnvironment:
    @pytest.mark.unit()
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)

        assert settings.vault_addr == ""
        assert settings.vault_token.get_secret_value() == ""
        assert settings.strict_validation is True
        assert settings.scoping_strategy is ScopingStrategy.COMPOSITE_SCOPING
        assert settings.kv_mount_path == "kv"
        assert settings.auth_path == "approle"

    @pytest.mark.unit()
    def test_prefixed_variables(self, monkeypatch) -> None:
        monkeypatch.setenv("VAULT_NS_APP_NAME", "api-service")
        monkeypatch.setenv("VAULT_NS_ORGANIZATION_ID", "acme-corp-uuid")
        monkeypatch.setenv("VAULT_NS_TEAM_ID", "payments-team-uuid")
        monkeypatch.setenv("VAULT_NS_PREFIX", "production/")
        monkeypatch.setenv("VAULT_NS_USE_RANDOM_SUFFIX", "true")
        monkeypatch.setenv("VAULT_NS_STRICT_VALIDATION", "false")
        monkeypatch.setenv("VAULT_NS_SCOPING_STRATEGY", "app_id_override")

        settings = Settings(_env_file=None)

        assert settings.app_name == "api-service"
        assert settings.organization_id == "acme-corp-uuid"
        assert settings.team_id == "payments-team-uuid"
        assert settings.prefix == "production/"
        assert settings.use_random_suffix is True
        assert settings.strict_validation is False
        assert settings.scoping_strategy is ScopingStrategy.APP_ID_OVERRIDE

    @pytest.mark.unit()
    def test_standard_vault_variables(self, monkeypatch) -> None:
        monkeypatch.setenv("VAULT_ADDR", "https://vault.example.com:8200")
        monkeypatch.setenv("VAULT_TOKEN", "hvs.operator")
        monkeypatch.setenv("VAULT_NAMESPACE", "admin")

        settings = Settings(_env_file=None)

        assert settings.vault_addr == "https://vault.example.com:8200"
        assert settings.vault_token.get_secret_value() == "hvs.operator"
        assert "hvs.operator" not in repr(settings)
        assert settings.vault_namespace == "admin"

    @pytest.mark.unit()
    def test_invalid_suffix_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, random_suffix="NOT-HEX")

    @pytest.mark.unit()
    def test_invalid_strategy_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, scoping_strategy="flat")

    @pytest.mark.unit()
    def test_get_settings_cached(self) -> None:
        assert get_settings() is get_settings()


class TestConversion:
    @pytest.mark.unit()
    def test_to_path_inputs_uses_pinned_suffix(self) -> None:
        settings = Settings(
            _env_file=None,
            app_name="my-app",
            use_random_suffix=True,
            random_suffix="a1b2c3d4",
        )

        inputs = settings.to_path_inputs()

        assert inputs.app_name == "my-app"
        assert inputs.use_random_suffix is True
        assert inputs.random_suffix_value == "a1b2c3d4"

    @pytest.mark.unit()
    def test_generated_suffix_overrides_pinned(self) -> None:
        settings = Settings(_env_file=None, app_name="my-app", random_suffix="a1b2c3d4")

        assert settings.to_path_inputs("deadbeef").random_suffix_value == "deadbeef"

    @pytest.mark.unit()
    def test_resolver_options(self) -> None:
        settings = Settings(
            _env_file=None,
            strict_validation=False,
            scoping_strategy=ScopingStrategy.APP_ID_OVERRIDE,
        )

        options = settings.resolver_options()

        assert options.strict_validation is False
        assert options.strategy is ScopingStrategy.APP_ID_OVERRIDE
