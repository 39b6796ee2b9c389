"""
Declared resources for one application namespace.

A ProvisioningPlan is the desired end state keyed by the resolved namespace
path. It is built without any I/O and applied (or destroyed) by
VaultNamespaceProvisioner. Resources are listed in dependency order:

    namespace -> kv mount -> policy -> auth backend -> role -> secret id
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from libs.vault_namespace.exceptions import ValidationError
from libs.vault_namespace.policy import policy_name_for, render_policy
from libs.vault_namespace.resolver import namespace_segments
from libs.vault_namespace.validation import check_path_segments

DEFAULT_KV_MOUNT_PATH = "kv"
DEFAULT_AUTH_PATH = "approle"


@dataclass(frozen=True)
class NamespaceResource:
    path: str

    @property
    def segments(self) -> list[str]:
        return namespace_segments(self.path)


@dataclass(frozen=True)
class KVMountResource:
    path: str = DEFAULT_KV_MOUNT_PATH
    version: int = 2
    description: str = ""


@dataclass(frozen=True)
class PolicyResource:
    name: str
    body: str


@dataclass(frozen=True)
class AuthBackendResource:
    path: str = DEFAULT_AUTH_PATH
    method_type: str = "approle"
    description: str = ""


@dataclass(frozen=True)
class AppRoleResource:
    role_name: str
    token_policies: tuple[str, ...]
    token_ttl: str = "1h"
    token_max_ttl: str = "4h"
    secret_id_ttl: str = "0"


@dataclass(frozen=True)
class SecretIdResource:
    role_name: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ProvisioningPlan:
    """Desired state for one application namespace.

    All resources other than the namespace itself are created inside
    ``namespace.path``.
    """

    app_name: str
    namespace: NamespaceResource
    kv_mount: KVMountResource
    data_path: str
    policy: PolicyResource
    auth_backend: AuthBackendResource
    role: AppRoleResource
    secret_id: SecretIdResource

    @property
    def namespace_path(self) -> str:
        return self.namespace.path

    def describe(self) -> dict[str, Any]:
        """Return a JSON-serializable summary of the plan (no credentials)."""
        return {
            "app_name": self.app_name,
            "namespace": {"path": self.namespace.path, "segments": self.namespace.segments},
            "kv_mount": asdict(self.kv_mount),
            "data_path": self.data_path,
            "policy": asdict(self.policy),
            "auth_backend": asdict(self.auth_backend),
            "role": {**asdict(self.role), "token_policies": list(self.role.token_policies)},
            "secret_id": asdict(self.secret_id),
        }


def build_plan(
    namespace_path: str,
    app_name: str,
    *,
    policy_template: str,
    kv_mount_path: str = DEFAULT_KV_MOUNT_PATH,
    data_path: str | None = None,
    auth_path: str = DEFAULT_AUTH_PATH,
    token_ttl: str = "1h",
    token_max_ttl: str = "4h",
    secret_id_ttl: str = "0",
    secret_id_metadata: dict[str, str] | None = None,
) -> ProvisioningPlan:
    """Declare the resources for ``app_name`` under ``namespace_path``.

    Args:
        namespace_path: Resolved namespace path (see resolve_namespace_path)
        app_name: Application name, also used as the AppRole role name
        policy_template: Policy template text (see libs.vault_namespace.policy)
        kv_mount_path: KV v2 mount path inside the namespace
        data_path: Sub-path under the mount granted to the app. Defaults to app_name.
        auth_path: AppRole auth backend mount path
        token_ttl: TTL of tokens issued to the role
        token_max_ttl: Maximum TTL of tokens issued to the role
        secret_id_ttl: TTL of generated secret ids ("0" = no expiry)
        secret_id_metadata: Metadata attached to the generated secret id

    Raises:
        ValidationError: If a path is empty or the template does not render
    """
    if not namespace_path or namespace_path != namespace_path.strip("/"):
        raise ValidationError(
            "must be non-empty without leading or trailing slash",
            field="namespace_path",
            value=namespace_path,
        )
    check_path_segments(namespace_path, "namespace_path")
    mount = kv_mount_path.strip("/")
    if not mount:
        raise ValidationError("must not be empty", field="kv_mount_path", value=kv_mount_path)
    auth = auth_path.strip("/")
    if not auth:
        raise ValidationError("must not be empty", field="auth_path", value=auth_path)
    resolved_data_path = (data_path or app_name).strip("/")

    policy_name = policy_name_for(app_name)
    body = render_policy(policy_template, app_name, mount, resolved_data_path)

    metadata = {"app_name": app_name, "namespace": namespace_path}
    metadata.update(secret_id_metadata or {})

    return ProvisioningPlan(
        app_name=app_name,
        namespace=NamespaceResource(path=namespace_path),
        kv_mount=KVMountResource(
            path=mount,
            description=f"Secrets for {app_name}",
        ),
        data_path=resolved_data_path,
        policy=PolicyResource(name=policy_name, body=body),
        auth_backend=AuthBackendResource(
            path=auth,
            description=f"AppRole auth for {app_name}",
        ),
        role=AppRoleResource(
            role_name=app_name,
            token_policies=(policy_name,),
            token_ttl=token_ttl,
            token_max_ttl=token_max_ttl,
            secret_id_ttl=secret_id_ttl,
        ),
        secret_id=SecretIdResource(role_name=app_name, metadata=metadata),
    )
