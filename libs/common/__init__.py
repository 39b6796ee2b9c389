"""Common utilities and exceptions."""

from libs.common.exceptions import ConfigurationError, VaultNamespaceError

__all__ = [
    "VaultNamespaceError",
    "ConfigurationError",
]
