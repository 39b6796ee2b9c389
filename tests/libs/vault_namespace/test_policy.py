"""Tests for ACL policy template rendering."""

from pathlib import Path

import pytest

from libs.vault_namespace.exceptions import ValidationError
from libs.vault_namespace.policy import (
    DEFAULT_TEMPLATE_PATH,
    load_policy_template,
    policy_name_for,
    render_policy,
)


class TestLoadPolicyTemplate:
    @pytest.mark.unit()
    def test_default_template_shipped(self) -> None:
        assert DEFAULT_TEMPLATE_PATH.is_file()
        assert "{{ mount_path }}" in load_policy_template()

    @pytest.mark.unit()
    def test_custom_template(self, tmp_path: Path) -> None:
        template = tmp_path / "policy.hcl.j2"
        template.write_text('path "{{ mount_path }}/data/*" { capabilities = ["read"] }\n')

        assert load_policy_template(template).startswith('path "{{ mount_path }}')

    @pytest.mark.unit()
    def test_missing_template(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="not found"):
            load_policy_template(tmp_path / "missing.j2")

    @pytest.mark.unit()
    def test_empty_template(self, tmp_path: Path) -> None:
        template = tmp_path / "empty.j2"
        template.write_text("  \n")

        with pytest.raises(ValidationError, match="empty"):
            load_policy_template(template)


class TestRenderPolicy:
    @pytest.mark.unit()
    def test_default_template_grants_app_data_path(self) -> None:
        body = render_policy(load_policy_template(), "my-app", "kv", "my-app")

        assert 'path "kv/data/my-app/*"' in body
        assert 'path "kv/metadata/my-app/*"' in body
        assert "# Policy for my-app" in body
        assert "{{" not in body
        assert body.endswith("}\n")

    @pytest.mark.unit()
    def test_paths_stripped_of_slashes(self) -> None:
        body = render_policy(
            "{{ mount_path }}|{{ data_path }}", "my-app", "/secret/", "/shared/config/"
        )

        assert body == "secret|shared/config"

    @pytest.mark.unit()
    def test_unknown_placeholder(self) -> None:
        with pytest.raises(ValidationError, match="unknown placeholder: 'team' is undefined"):
            render_policy('path "{{ team }}/*" {}', "my-app", "kv", "my-app")

    @pytest.mark.unit()
    def test_malformed_template(self) -> None:
        with pytest.raises(ValidationError, match="malformed template"):
            render_policy('path "{{ mount_path /*" {}', "my-app", "kv", "my-app")

    @pytest.mark.unit()
    def test_hcl_braces_and_dollar_kept(self) -> None:
        body = render_policy('path "${identity}/{{ app_name }}" { x = 1 }', "my-app", "kv", "x")

        assert body == 'path "${identity}/my-app" { x = 1 }'

    @pytest.mark.unit()
    def test_filters_available(self) -> None:
        assert render_policy("{{ app_name | upper }}", "my-app", "kv", "x") == "MY-APP"

    @pytest.mark.unit()
    def test_values_not_html_escaped(self) -> None:
        assert render_policy("{{ data_path }}", "my-app", "kv", "a&b") == "a&b"

    @pytest.mark.unit()
    def test_policy_name(self) -> None:
        assert policy_name_for("my-app") == "my-app-policy"
