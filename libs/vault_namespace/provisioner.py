"""
HashiCorp Vault Namespace Provisioner.

This module applies a ProvisioningPlan against a Vault Enterprise (or HCP
Vault) cluster via the hvac library, and tears it down again.

Architecture:
    - Uses hvac for sys/namespaces, sys/mounts, sys/policy, sys/auth and AppRole
    - One hvac client per namespace level (X-Vault-Namespace header)
    - Nested namespaces created one level at a time, parents first
    - Automatic retries (3 attempts, exponential backoff) for VaultDown and
      connection errors
    - Every other hvac error translated to UpstreamProvisioningError

Idempotence:
    - Namespaces, the KV mount and the auth backend are only created when absent
    - The policy and role are upserted on every apply
    - A fresh secret id is generated on every apply (previous ids stay valid
      until their TTL expires)

Security Considerations:
    - Role ids and secret ids are NEVER logged (only paths and names)
    - The secret id is returned as a pydantic SecretStr
    - TLS verification on by default

Usage Example:
    >>> provisioner = VaultNamespaceProvisioner(
    ...     vault_url="https://vault.company.com:8200",
    ...     token="hvs.operator",
    ...     parent_namespace="admin",
    ... )
    >>> result = provisioner.apply(plan)
    >>> result.namespace_path
    'production/acme-corp-uuid/payments-team-uuid/api-service'
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import hvac
import requests
from hvac.exceptions import Forbidden, InvalidPath, InvalidRequest, Unauthorized, VaultDown, VaultError
from pydantic import SecretStr
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from libs.common.exceptions import ConfigurationError
from libs.vault_namespace.exceptions import UpstreamProvisioningError
from libs.vault_namespace.plan import ProvisioningPlan
from libs.vault_namespace.resolver import namespace_segments

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Server down or not reachable at all (refused connection, DNS, timeout)
TRANSIENT_ERRORS = (VaultDown, requests.exceptions.ConnectionError, requests.exceptions.Timeout)


@dataclass(frozen=True)
class ProvisioningResult:
    """Outputs of a successful apply.

    ``secret_id`` is confidential; call ``get_secret_value()`` only when handing
    it to the deployed application.
    """

    namespace_path: str
    role_name: str
    role_id: str
    secret_id: SecretStr
    secret_id_accessor: str
    kv_mount_path: str
    data_path: str
    auth_path: str
    created: list[str] = field(default_factory=list)


def join_namespace(parent: str | None, child: str) -> str:
    """Join a parent namespace and a relative child path."""
    parent = (parent or "").strip("/")
    child = child.strip("/")
    if parent and child:
        return f"{parent}/{child}"
    return parent or child


class VaultNamespaceProvisioner:
    """
    Apply and destroy application namespaces in HashiCorp Vault.

    All namespace paths handled here are relative to ``parent_namespace``
    (the namespace the operator token lives in, e.g. "admin" on HCP Vault).

    Example:
        >>> with VaultNamespaceProvisioner(vault_url=url, token=token) as provisioner:
        ...     result = provisioner.apply(plan)
    """

    def __init__(
        self,
        vault_url: str,
        token: str,
        parent_namespace: str | None = None,
        verify: bool = True,
    ) -> None:
        """
        Initialize the provisioner and verify the operator token.

        Args:
            vault_url: Vault server URL (e.g., "https://vault.company.com:8200")
            token: Operator token able to manage namespaces under parent_namespace
            parent_namespace: Namespace new namespaces are created under (None = root)
            verify: Verify TLS certificates. Default: True

        Raises:
            ConfigurationError: vault_url or token missing
            UpstreamProvisioningError: Vault unreachable or token rejected
        """
        if not vault_url:
            raise ConfigurationError("VAULT_ADDR must be set to provision namespaces")
        if not token:
            raise ConfigurationError("VAULT_TOKEN must be set to provision namespaces")

        self._vault_url = vault_url
        self._token = token
        self._parent_namespace = (parent_namespace or "").strip("/") or None
        self._verify = verify
        self._clients: dict[str, Any] = {}

        try:
            client = self._client_for(None)
            try:
                if not client.is_authenticated():
                    raise UpstreamProvisioningError(
                        resource="vault_auth",
                        target=vault_url,
                        reason="Vault authentication failed. Verify token is valid and not expired.",
                    )
            except Forbidden:
                # Token lacks 'lookup-self'; defer validation to the first call
                logger.info(
                    "Vault token lacks 'lookup-self' capability, deferring validation",
                    extra={"vault_url": vault_url},
                )
        except UpstreamProvisioningError:
            raise
        except (Unauthorized, Forbidden) as e:
            raise UpstreamProvisioningError(
                resource="vault_auth",
                target=vault_url,
                reason=f"Vault authentication failed: {e}",
            ) from e
        except TRANSIENT_ERRORS as e:
            raise UpstreamProvisioningError(
                resource="vault_connectivity",
                target=vault_url,
                reason=f"Vault server unreachable: {e}",
            ) from e
        except VaultError as e:
            raise UpstreamProvisioningError(
                resource="vault_init",
                target=vault_url,
                reason=f"Vault initialization failed: {e}",
            ) from e

        logger.info(
            "Connected to Vault",
            extra={"vault_url": vault_url, "parent_namespace": self._parent_namespace},
        )

    def _client_for(self, namespace: str | None) -> Any:
        """Return an hvac client scoped to ``namespace`` (relative to the parent)."""
        full_namespace = join_namespace(self._parent_namespace, namespace or "")
        if full_namespace not in self._clients:
            self._clients[full_namespace] = hvac.Client(
                url=self._vault_url,
                token=self._token,
                namespace=full_namespace or None,
                verify=self._verify,
            )
        return self._clients[full_namespace]

    def _call(self, resource: str, target: str, operation: Callable[[], T]) -> T:
        """Run one Vault call with retries, translating hvac errors."""
        try:
            return self._call_with_retry(resource, target, operation)
        except TRANSIENT_ERRORS as e:
            logger.error(
                "Vault unreachable after retries",
                extra={"resource": resource, "target": target},
            )
            raise UpstreamProvisioningError(
                resource=resource,
                target=target,
                reason=f"Vault server unreachable: {e}",
            ) from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        reraise=True,
    )
    def _call_with_retry(self, resource: str, target: str, operation: Callable[[], T]) -> T:
        try:
            return operation()
        except TRANSIENT_ERRORS:
            # VaultDown subclasses VaultError, must be re-raised before the generic handler
            raise
        except (Forbidden, Unauthorized) as e:
            raise UpstreamProvisioningError(
                resource=resource,
                target=target,
                reason=f"Permission denied: {e}",
            ) from e
        except InvalidRequest as e:
            raise UpstreamProvisioningError(
                resource=resource,
                target=target,
                reason=f"Invalid request: {e}",
            ) from e
        except VaultError as e:
            logger.error(
                "Vault call failed - server error",
                extra={
                    "resource": resource,
                    "target": target,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            raise UpstreamProvisioningError(
                resource=resource,
                target=target,
                reason=str(e) or type(e).__name__,
            ) from e

    # ------------------------------------------------------------------
    # Existence checks
    # ------------------------------------------------------------------

    def _list_child_namespaces(self, parent: str | None) -> set[str]:
        client = self._client_for(parent)
        target = parent or "<root>"

        def _list() -> set[str]:
            try:
                response = client.sys.list_namespaces()
            except InvalidPath:
                # No child namespaces yet
                return set()
            keys = response.get("data", {}).get("keys", [])
            return {key.rstrip("/") for key in keys}

        return self._call("namespace", target, _list)

    def namespace_exists(self, path: str) -> bool:
        parent, _, leaf = path.strip("/").rpartition("/")
        return leaf in self._list_child_namespaces(parent or None)

    @staticmethod
    def _mounted(response: dict[str, Any], path: str) -> bool:
        mounts = response.get("data") or response
        return f"{path.strip('/')}/" in mounts

    def _secrets_engine_mounted(self, namespace: str, path: str) -> bool:
        client = self._client_for(namespace)
        response = self._call("kv_mount", path, client.sys.list_mounted_secrets_engines)
        return self._mounted(response, path)

    def _auth_method_enabled(self, namespace: str, path: str) -> bool:
        client = self._client_for(namespace)
        response = self._call("auth_backend", path, client.sys.list_auth_methods)
        return self._mounted(response, path)

    # ------------------------------------------------------------------
    # Apply
    # ------------------------------------------------------------------

    def _ensure_namespace(self, path: str) -> list[str]:
        """Create every missing level of ``path``; return the levels created."""
        created: list[str] = []
        for full_path in namespace_segments(path):
            parent, _, leaf = full_path.rpartition("/")
            if leaf not in self._list_child_namespaces(parent or None):
                client = self._client_for(parent or None)
                self._call(
                    "namespace",
                    full_path,
                    lambda client=client, leaf=leaf: client.sys.create_namespace(path=leaf),
                )
                created.append(full_path)
                logger.info("Created namespace", extra={"namespace": full_path})
        return created

    def apply(self, plan: ProvisioningPlan) -> ProvisioningResult:
        """
        Create or update every resource in ``plan``.

        Args:
            plan: Declared resources (see build_plan)

        Returns:
            ProvisioningResult with the namespace path and credential pair

        Raises:
            UpstreamProvisioningError: Any Vault call failed. Resources created
                before the failure are left in place; re-running apply resumes.
        """
        namespace = plan.namespace_path
        created = [f"namespace:{path}" for path in self._ensure_namespace(namespace)]
        client = self._client_for(namespace)

        mount = plan.kv_mount
        if not self._secrets_engine_mounted(namespace, mount.path):
            self._call(
                "kv_mount",
                mount.path,
                lambda: client.sys.enable_secrets_engine(
                    backend_type="kv",
                    path=mount.path,
                    description=mount.description,
                    options={"version": str(mount.version)},
                ),
            )
            created.append(f"kv_mount:{mount.path}")
            logger.info(
                "Enabled KV secrets engine",
                extra={"namespace": namespace, "mount_point": mount.path},
            )

        policy = plan.policy
        self._call(
            "policy",
            policy.name,
            lambda: client.sys.create_or_update_policy(name=policy.name, policy=policy.body),
        )
        logger.info("Wrote policy", extra={"namespace": namespace, "policy": policy.name})

        auth = plan.auth_backend
        if not self._auth_method_enabled(namespace, auth.path):
            self._call(
                "auth_backend",
                auth.path,
                lambda: client.sys.enable_auth_method(
                    method_type=auth.method_type,
                    path=auth.path,
                    description=auth.description,
                ),
            )
            created.append(f"auth_backend:{auth.path}")
            logger.info(
                "Enabled auth method",
                extra={"namespace": namespace, "auth_path": auth.path},
            )

        role = plan.role
        self._call(
            "approle_role",
            role.role_name,
            lambda: client.auth.approle.create_or_update_approle(
                role_name=role.role_name,
                token_policies=list(role.token_policies),
                token_ttl=role.token_ttl,
                token_max_ttl=role.token_max_ttl,
                secret_id_ttl=role.secret_id_ttl,
                mount_point=auth.path,
            ),
        )
        logger.info("Wrote AppRole role", extra={"namespace": namespace, "role": role.role_name})

        role_id_response = self._call(
            "approle_role_id",
            role.role_name,
            lambda: client.auth.approle.read_role_id(
                role_name=role.role_name,
                mount_point=auth.path,
            ),
        )
        secret_id_response = self._call(
            "approle_secret_id",
            role.role_name,
            lambda: client.auth.approle.generate_secret_id(
                role_name=role.role_name,
                metadata=plan.secret_id.metadata,
                mount_point=auth.path,
            ),
        )

        try:
            role_id = role_id_response["data"]["role_id"]
            secret_data = secret_id_response["data"]
            secret_id = secret_data["secret_id"]
            accessor = secret_data.get("secret_id_accessor", "")
        except (KeyError, TypeError) as e:
            raise UpstreamProvisioningError(
                resource="approle_secret_id",
                target=role.role_name,
                reason=f"Unexpected AppRole response format: missing {e}",
            ) from e

        logger.info(
            "Generated AppRole secret id",
            extra={"namespace": namespace, "role": role.role_name, "accessor": accessor},
        )

        return ProvisioningResult(
            namespace_path=namespace,
            role_name=role.role_name,
            role_id=role_id,
            secret_id=SecretStr(secret_id),
            secret_id_accessor=accessor,
            kv_mount_path=mount.path,
            data_path=plan.data_path,
            auth_path=auth.path,
            created=created,
        )

    # ------------------------------------------------------------------
    # Destroy
    # ------------------------------------------------------------------

    def destroy(self, plan: ProvisioningPlan) -> list[str]:
        """
        Remove the resources of ``plan`` in reverse dependency order.

        Only the leaf namespace is deleted; parent levels may be shared with
        other applications and are left intact. Missing resources are skipped.

        Returns:
            Resources removed, as "kind:name" strings
        """
        namespace = plan.namespace_path
        removed: list[str] = []

        if not self.namespace_exists(namespace):
            logger.info("Namespace already absent", extra={"namespace": namespace})
            return removed

        client = self._client_for(namespace)
        auth = plan.auth_backend

        if self._auth_method_enabled(namespace, auth.path):

            def _delete_role() -> bool:
                try:
                    client.auth.approle.delete_role(
                        role_name=plan.role.role_name,
                        mount_point=auth.path,
                    )
                except InvalidPath:
                    return False
                return True

            if self._call("approle_role", plan.role.role_name, _delete_role):
                removed.append(f"approle_role:{plan.role.role_name}")
            self._call(
                "auth_backend",
                auth.path,
                lambda: client.sys.disable_auth_method(path=auth.path),
            )
            removed.append(f"auth_backend:{auth.path}")

        self._call(
            "policy",
            plan.policy.name,
            lambda: client.sys.delete_policy(name=plan.policy.name),
        )
        removed.append(f"policy:{plan.policy.name}")

        if self._secrets_engine_mounted(namespace, plan.kv_mount.path):
            self._call(
                "kv_mount",
                plan.kv_mount.path,
                lambda: client.sys.disable_secrets_engine(path=plan.kv_mount.path),
            )
            removed.append(f"kv_mount:{plan.kv_mount.path}")

        parent, _, leaf = namespace.rpartition("/")
        parent_client = self._client_for(parent or None)
        self._call(
            "namespace",
            namespace,
            lambda: parent_client.sys.delete_namespace(path=leaf),
        )
        removed.append(f"namespace:{namespace}")
        self._clients.pop(join_namespace(self._parent_namespace, namespace), None)

        logger.info(
            "Destroyed application namespace",
            extra={"namespace": namespace, "removed_count": len(removed)},
        )
        return removed

    def close(self) -> None:
        """Close the HTTP adapters of every cached hvac client."""
        for client in self._clients.values():
            adapter = getattr(client, "adapter", None)
            if adapter and hasattr(adapter, "close"):
                adapter.close()
        self._clients.clear()

    def __enter__(self) -> VaultNamespaceProvisioner:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
