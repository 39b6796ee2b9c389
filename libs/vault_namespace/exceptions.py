"""
Namespace Provisioning Exception Hierarchy.

Exception hierarchy:
    VaultNamespaceError (base, libs.common.exceptions)
    ├── ValidationError - Inputs rejected before any Vault call
    └── UpstreamProvisioningError - Vault rejected or failed a resource call

Validation errors are raised before the resolved path reaches any resource
declaration. Vault does not allow renaming a namespace, so this is the only
point where a bad path can be caught cheaply.

Neither exception ever carries credential values (role ids, secret ids,
tokens) in its message or attributes.
"""

from libs.common.exceptions import VaultNamespaceError


class ValidationError(VaultNamespaceError):
    """
    Raised when provisioning inputs fail validation.

    This exception is raised when:
    - app_name is empty or longer than 50 characters
    - A manual namespace path fails the charset check (strict mode)
    - The random suffix flag is set without a suffix value
    - A policy template references an unknown placeholder

    Attributes:
        field: Name of the offending input (e.g., "manual_path")
        value: The rejected value (never a credential)
        message: Human-readable error message

    Example:
        >>> raise ValidationError("must not be empty", field="app_name", value="")
        ValidationError: Invalid app_name: must not be empty
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: str | None = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.value = value
        self.message = message

    def __str__(self) -> str:
        if self.field:
            return f"Invalid {self.field}: {self.message}"
        return self.message


class UpstreamProvisioningError(VaultNamespaceError):
    """
    Raised when Vault fails to create, update or delete a resource.

    The Vault diagnostic is preserved unmodified in ``reason`` so operators see
    exactly what the server reported (permission denied, namespace already
    exists, connection refused).

    Attributes:
        resource: Resource kind being provisioned (e.g., "namespace", "kv_mount")
        target: Path or name of the resource within the namespace
        reason: Vault's native diagnostic

    Example:
        >>> raise UpstreamProvisioningError(
        ...     resource="policy",
        ...     target="my-app-policy",
        ...     reason="1 error occurred: permission denied",
        ... )
    """

    def __init__(self, resource: str, target: str, reason: str) -> None:
        if not isinstance(resource, str) or not resource:
            raise TypeError("resource must be a non-empty string")
        if not isinstance(reason, str) or not reason:
            raise TypeError("reason must be a non-empty string")

        message = f"Failed to provision {resource} '{target}': {reason}"
        super().__init__(message)
        self.resource = resource
        self.target = target
        self.reason = reason
        self.message = message

    def __str__(self) -> str:
        return self.message
