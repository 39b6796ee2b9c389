"""
Provisioner settings loaded from environment variables.

Uses Pydantic Settings for type-safe configuration with validation.
Namespace inputs use the ``VAULT_NS_`` prefix; the Vault connection uses the
standard ``VAULT_ADDR`` / ``VAULT_TOKEN`` / ``VAULT_NAMESPACE`` variables.

Settings are assembled once at process start and converted by value into
NamespacePathInputs and ResolverOptions; the resolver itself never reads the
environment.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from libs.vault_namespace.inputs import NamespacePathInputs, ResolverOptions, ScopingStrategy
from libs.vault_namespace.suffix import is_valid_suffix


class Settings(BaseSettings):
    """
    Provisioner configuration.

    All settings are loaded from environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="VAULT_NS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Vault connection
    vault_addr: str = Field(
        default="",
        validation_alias="VAULT_ADDR",
        description="Vault server URL",
    )
    vault_token: SecretStr = Field(
        default=SecretStr(""),
        validation_alias="VAULT_TOKEN",
        description="Operator token able to manage namespaces",
    )
    vault_namespace: str = Field(
        default="",
        validation_alias="VAULT_NAMESPACE",
        description="Parent namespace new namespaces are created under (e.g. 'admin' on HCP)",
    )
    vault_skip_verify: bool = Field(
        default=False,
        validation_alias="VAULT_SKIP_VERIFY",
        description="Disable TLS verification (local development only)",
    )

    # Namespace path inputs
    app_name: str = Field(default="", description="Application name (1-50 chars)")
    manual_path: str = Field(default="", description="Explicit namespace path override")
    organization_id: str = Field(default="", description="Organization identity token")
    team_id: str = Field(default="", description="Team identity token")
    app_id: str = Field(default="", description="Application identity token")
    prefix: str = Field(default="", description="Namespace path prefix")
    use_random_suffix: bool = Field(default=False, description="Append a random hex suffix")
    random_suffix: str = Field(
        default="",
        description="Pinned random suffix (generated once when empty)",
    )
    strict_validation: bool = Field(
        default=True,
        description="Reject manual paths outside [a-z0-9/-]",
    )
    scoping_strategy: ScopingStrategy = Field(
        default=ScopingStrategy.COMPOSITE_SCOPING,
        description="composite | app_id_override",
    )

    # Resources
    kv_mount_path: str = Field(default="kv", description="KV v2 mount path in the namespace")
    data_path: str = Field(default="", description="Data sub-path granted to the app (default: app name)")
    auth_path: str = Field(default="approle", description="AppRole auth backend path")
    policy_template: str = Field(default="", description="Custom policy template file")
    token_ttl: str = Field(default="1h", description="TTL of tokens issued to the role")
    token_max_ttl: str = Field(default="4h", description="Maximum TTL of tokens issued to the role")
    secret_id_ttl: str = Field(default="0", description="TTL of generated secret ids (0 = none)")

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @field_validator("scoping_strategy", mode="before")
    @classmethod
    def _parse_strategy(cls, value: object) -> ScopingStrategy:
        return ScopingStrategy.parse(value)  # type: ignore[arg-type]

    @field_validator("random_suffix")
    @classmethod
    def _check_suffix(cls, value: str) -> str:
        if value and not is_valid_suffix(value):
            raise ValueError("random_suffix must be a lowercase hex token")
        return value

    def to_path_inputs(self, random_suffix_value: str | None = None) -> NamespacePathInputs:
        """Return the resolver inputs for this run.

        ``random_suffix_value`` overrides the pinned suffix; callers generate
        one when use_random_suffix is set and nothing is pinned.
        """
        return NamespacePathInputs(
            app_name=self.app_name,
            manual_path=self.manual_path,
            app_id=self.app_id,
            organization_id=self.organization_id,
            team_id=self.team_id,
            prefix=self.prefix,
            use_random_suffix=self.use_random_suffix,
            random_suffix_value=random_suffix_value or self.random_suffix,
        )

    def resolver_options(self) -> ResolverOptions:
        return ResolverOptions(
            strategy=self.scoping_strategy,
            strict_validation=self.strict_validation,
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.

    Returns:
        Settings: Application settings
    """
    return Settings()
