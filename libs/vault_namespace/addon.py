"""
Deployment add-on wrapper.

Packages the outputs of a provisioning run for the application being
deployed: the resolved namespace path and the AppRole credential pair, plus
the connection details the application needs to log in and find its secrets.

The secret id is confidential. ``outputs()`` and ``environment()`` redact it
unless ``reveal=True``; ``write_dotenv()`` always writes it, to a file only the
owner can read.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from pydantic import SecretStr

from libs.vault_namespace.provisioner import ProvisioningResult, join_namespace

logger = logging.getLogger(__name__)

REDACTED = "**********"


@dataclass(frozen=True)
class DeploymentAddon:
    """Outputs handed to the provisioned application."""

    vault_addr: str
    namespace_path: str
    vault_namespace: str
    role_id: str
    secret_id: SecretStr
    kv_mount_path: str
    data_path: str
    auth_path: str

    @classmethod
    def from_result(
        cls,
        result: ProvisioningResult,
        vault_addr: str,
        parent_namespace: str | None = None,
    ) -> DeploymentAddon:
        """Build the add-on from an apply result.

        ``vault_namespace`` is the full namespace header value the application
        must send, i.e. the resolved path under ``parent_namespace``.
        """
        return cls(
            vault_addr=vault_addr,
            namespace_path=result.namespace_path,
            vault_namespace=join_namespace(parent_namespace, result.namespace_path),
            role_id=result.role_id,
            secret_id=result.secret_id,
            kv_mount_path=result.kv_mount_path,
            data_path=result.data_path,
            auth_path=result.auth_path,
        )

    def _secret(self, reveal: bool) -> str:
        return self.secret_id.get_secret_value() if reveal else REDACTED

    def outputs(self, reveal: bool = False) -> dict[str, str]:
        return {
            "namespace_path": self.namespace_path,
            "role_id": self.role_id,
            "secret_id": self._secret(reveal),
        }

    def environment(self, reveal: bool = False) -> dict[str, str]:
        """Environment variables for the application container."""
        return {
            "VAULT_ADDR": self.vault_addr,
            "VAULT_NAMESPACE": self.vault_namespace,
            "VAULT_AUTH_PATH": self.auth_path,
            "VAULT_ROLE_ID": self.role_id,
            "VAULT_SECRET_ID": self._secret(reveal),
            "VAULT_KV_MOUNT": self.kv_mount_path,
            "VAULT_KV_PATH": self.data_path,
        }

    def to_json(self, reveal: bool = False) -> str:
        return json.dumps(
            {"outputs": self.outputs(reveal), "environment": self.environment(reveal)},
            indent=2,
            sort_keys=True,
        )

    def to_env_lines(self, reveal: bool = False) -> list[str]:
        return [f"{key}={value}" for key, value in self.environment(reveal).items()]

    def write_dotenv(self, path: str | Path) -> Path:
        """Write the revealed environment to ``path`` with 0600 permissions."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write("\n".join(self.to_env_lines(reveal=True)) + "\n")
        os.chmod(target, 0o600)
        logger.info(
            "Wrote deployment environment file",
            extra={"path": str(target), "namespace": self.namespace_path},
        )
        return target
