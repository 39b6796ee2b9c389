"""
Exception hierarchy for the Vault namespace provisioner.

This module defines the base exceptions shared by every package in the
project, organized in a hierarchy for precise error handling.
"""


class VaultNamespaceError(Exception):
    """
    Base exception for all provisioner errors.

    All custom exceptions in the project inherit from this class,
    allowing for catch-all error handling when needed.

    Example:
        >>> try:
        ...     provisioner.apply(plan)
        ... except VaultNamespaceError as e:
        ...     logger.error(f"Provisioning error: {e}")
    """

    pass


class ConfigurationError(VaultNamespaceError):
    """
    Raised when required configuration or credentials are missing.

    Resolving a namespace path needs no external configuration, but applying
    or destroying a plan requires the Vault address and an operator token.

    Example:
        >>> if not settings.vault_addr:
        ...     raise ConfigurationError("VAULT_ADDR not configured")
    """

    pass
