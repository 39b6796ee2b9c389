"""
Vault Namespace Provisioning Library.

Provisions an isolated Vault namespace for an application: the namespace,
a KV v2 mount, an ACL policy, an AppRole auth backend, a role and a generated
credential pair.

Quick Start:
    >>> from libs.vault_namespace import NamespacePathInputs, resolve_namespace_path
    >>> resolve_namespace_path(NamespacePathInputs(app_name="my-app", prefix="staging"))
    'staging/my-app'

Flow:
    Settings -> NamespacePathInputs -> resolve_namespace_path()
             -> build_plan() -> VaultNamespaceProvisioner.apply()
             -> DeploymentAddon

The provisioner and add-on import hvac; they are loaded lazily so the
resolver can be used without a Vault client installed.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from libs.vault_namespace.addon import DeploymentAddon as DeploymentAddon
    from libs.vault_namespace.provisioner import ProvisioningResult as ProvisioningResult
    from libs.vault_namespace.provisioner import (
        VaultNamespaceProvisioner as VaultNamespaceProvisioner,
    )

from libs.vault_namespace.exceptions import UpstreamProvisioningError, ValidationError
from libs.vault_namespace.inputs import NamespacePathInputs, ResolverOptions, ScopingStrategy
from libs.vault_namespace.plan import ProvisioningPlan, build_plan
from libs.vault_namespace.policy import load_policy_template, render_policy
from libs.vault_namespace.resolver import (
    namespace_segments,
    random_suffix_applies,
    resolve_namespace_path,
)
from libs.vault_namespace.suffix import generate_random_suffix


def __getattr__(name: str) -> Any:
    """Lazy load the hvac-backed classes."""
    if name in ("VaultNamespaceProvisioner", "ProvisioningResult"):
        from libs.vault_namespace import provisioner

        return getattr(provisioner, name)
    if name == "DeploymentAddon":
        from libs.vault_namespace.addon import DeploymentAddon

        return DeploymentAddon
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Resolver
    "NamespacePathInputs",
    "ResolverOptions",
    "ScopingStrategy",
    "resolve_namespace_path",
    "namespace_segments",
    "random_suffix_applies",
    "generate_random_suffix",
    # Plan
    "ProvisioningPlan",
    "build_plan",
    "load_policy_template",
    "render_policy",
    # Provisioning (lazy loaded)
    "VaultNamespaceProvisioner",
    "ProvisioningResult",
    "DeploymentAddon",
    # Exceptions
    "ValidationError",
    "UpstreamProvisioningError",
]
