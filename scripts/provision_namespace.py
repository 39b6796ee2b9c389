#!/usr/bin/env python3
"""CLI for resolving, planning, applying and destroying application namespaces.

Settings come from the environment (see config/settings.py); flags override
individual values for one run.

Usage:
    provision-namespace resolve --app-name my-app --prefix staging
    provision-namespace plan --app-name api-service --organization-id acme --team-id payments
    provision-namespace apply --app-name my-app --output env --dotenv .vault.env
    provision-namespace destroy --app-name my-app --random-suffix a1b2c3d4 --use-random-suffix

Exit codes:
    0 - Success
    1 - Vault rejected or failed a provisioning call
    2 - Invalid input or missing configuration
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any

from config.settings import Settings, get_settings
from libs.common.exceptions import ConfigurationError
from libs.common.logging import (
    RUN_ID_ENV_VAR,
    RunContext,
    configure_logging,
    get_logger,
    log_with_context,
)
from libs.vault_namespace.exceptions import UpstreamProvisioningError, ValidationError
from libs.vault_namespace.inputs import ScopingStrategy
from libs.vault_namespace.plan import ProvisioningPlan, build_plan
from libs.vault_namespace.policy import load_policy_template
from libs.vault_namespace.resolver import random_suffix_applies, resolve_namespace_path
from libs.vault_namespace.suffix import generate_random_suffix, is_valid_suffix

logger = get_logger(__name__)

EXIT_UPSTREAM_ERROR = 1
EXIT_INVALID_INPUT = 2


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    fields = (
        "app_name",
        "manual_path",
        "organization_id",
        "team_id",
        "app_id",
        "prefix",
        "random_suffix",
        "scoping_strategy",
        "kv_mount_path",
        "data_path",
        "policy_template",
    )
    updates = {name: getattr(args, name) for name in fields if getattr(args, name, None) is not None}
    if getattr(args, "use_random_suffix", False):
        updates["use_random_suffix"] = True
    if getattr(args, "no_strict", False):
        updates["strict_validation"] = False
    return updates


def load_settings(args: argparse.Namespace) -> Settings:
    return get_settings().model_copy(update=_overrides(args))


def resolve_path(settings: Settings, generate_suffix: bool = True) -> str:
    """Resolve the namespace path, generating a suffix once if needed.

    With ``generate_suffix=False`` a random-suffix path must use the pinned
    suffix, since a fresh one would name a namespace that was never created.
    """
    suffix = settings.random_suffix
    if suffix and not is_valid_suffix(suffix):
        raise ValidationError("must be a lowercase hex token", field="random_suffix", value=suffix)
    inputs = settings.to_path_inputs()
    if random_suffix_applies(inputs) and not suffix:
        if not generate_suffix:
            raise ValidationError(
                "must be pinned (VAULT_NS_RANDOM_SUFFIX or --random-suffix) "
                "to target an existing namespace",
                field="random_suffix",
            )
        suffix = generate_random_suffix()
        logger.warning(
            "Generated random namespace suffix; pin it with VAULT_NS_RANDOM_SUFFIX "
            "to target the same namespace on later runs",
            extra={"random_suffix": suffix},
        )
        inputs = settings.to_path_inputs(random_suffix_value=suffix)
    namespace_path = resolve_namespace_path(inputs, settings.resolver_options())
    log_with_context(
        logger,
        "INFO",
        "Resolved namespace path",
        namespace=namespace_path,
        strategy=settings.scoping_strategy.value,
    )
    return namespace_path


def build_plan_for(settings: Settings, generate_suffix: bool = True) -> ProvisioningPlan:
    namespace_path = resolve_path(settings, generate_suffix=generate_suffix)
    return build_plan(
        namespace_path,
        settings.app_name,
        policy_template=load_policy_template(settings.policy_template or None),
        kv_mount_path=settings.kv_mount_path,
        data_path=settings.data_path or None,
        auth_path=settings.auth_path,
        token_ttl=settings.token_ttl,
        token_max_ttl=settings.token_max_ttl,
        secret_id_ttl=settings.secret_id_ttl,
    )


def build_provisioner(settings: Settings) -> Any:
    # hvac is only needed for apply/destroy
    from libs.vault_namespace.provisioner import VaultNamespaceProvisioner

    return VaultNamespaceProvisioner(
        vault_url=settings.vault_addr,
        token=settings.vault_token.get_secret_value(),
        parent_namespace=settings.vault_namespace or None,
        verify=not settings.vault_skip_verify,
    )


def cmd_resolve(args: argparse.Namespace, settings: Settings) -> None:
    print(resolve_path(settings))


def cmd_plan(args: argparse.Namespace, settings: Settings) -> None:
    print(json.dumps(build_plan_for(settings).describe(), indent=2))


def cmd_apply(args: argparse.Namespace, settings: Settings) -> None:
    from libs.vault_namespace.addon import DeploymentAddon

    plan = build_plan_for(settings)
    with build_provisioner(settings) as provisioner:
        result = provisioner.apply(plan)
    log_with_context(
        logger,
        "INFO",
        "Provisioned namespace",
        namespace=result.namespace_path,
        created=result.created,
    )

    addon = DeploymentAddon.from_result(
        result,
        vault_addr=settings.vault_addr,
        parent_namespace=settings.vault_namespace or None,
    )
    if args.dotenv:
        addon.write_dotenv(args.dotenv)
    if args.output == "env":
        print("\n".join(addon.to_env_lines(reveal=args.reveal)))
    else:
        print(addon.to_json(reveal=args.reveal))


def cmd_destroy(args: argparse.Namespace, settings: Settings) -> None:
    plan = build_plan_for(settings, generate_suffix=False)
    with build_provisioner(settings) as provisioner:
        removed = provisioner.destroy(plan)
    log_with_context(
        logger,
        "INFO",
        "Destroyed namespace",
        namespace=plan.namespace_path,
        removed_count=len(removed),
    )
    for resource in removed:
        print(f"Removed {resource}")
    if not removed:
        print(f"Nothing to remove for {plan.namespace_path}")


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--app-name", dest="app_name")
    parser.add_argument("--manual-path", dest="manual_path")
    parser.add_argument("--organization-id", dest="organization_id")
    parser.add_argument("--team-id", dest="team_id")
    parser.add_argument("--app-id", dest="app_id")
    parser.add_argument("--prefix")
    parser.add_argument("--use-random-suffix", action="store_true")
    parser.add_argument("--random-suffix", dest="random_suffix", help="Pinned hex suffix")
    parser.add_argument(
        "--strategy",
        dest="scoping_strategy",
        type=ScopingStrategy.parse,
        help="composite | app_id_override",
    )
    parser.add_argument(
        "--no-strict",
        action="store_true",
        help="Accept manual paths outside [a-z0-9/-]",
    )


def _add_resource_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--kv-mount-path", dest="kv_mount_path")
    parser.add_argument("--data-path", dest="data_path")
    parser.add_argument("--policy-template", dest="policy_template", help="Policy template file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Provision isolated Vault namespaces")
    parser.add_argument("--log-level", help="Override VAULT_NS_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    p_resolve = sub.add_parser("resolve", help="Print the resolved namespace path")
    _add_input_arguments(p_resolve)
    p_resolve.set_defaults(func=cmd_resolve)

    p_plan = sub.add_parser("plan", help="Print the declared resources as JSON")
    _add_input_arguments(p_plan)
    _add_resource_arguments(p_plan)
    p_plan.set_defaults(func=cmd_plan)

    p_apply = sub.add_parser("apply", help="Provision the namespace and print its outputs")
    _add_input_arguments(p_apply)
    _add_resource_arguments(p_apply)
    p_apply.add_argument("--output", choices=["json", "env"], default="json")
    p_apply.add_argument("--reveal", action="store_true", help="Print the secret id in clear")
    p_apply.add_argument("--dotenv", help="Write the deployment environment to this file (0600)")
    p_apply.set_defaults(func=cmd_apply)

    p_destroy = sub.add_parser("destroy", help="Remove the namespace and its resources")
    _add_input_arguments(p_destroy)
    _add_resource_arguments(p_destroy)
    p_destroy.set_defaults(func=cmd_destroy)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args)
        configure_logging(
            service_name="vault_namespace",
            log_level=args.log_level or settings.log_level,
        )
        with RunContext(os.environ.get(RUN_ID_ENV_VAR) or None):
            args.func(args, settings)
    except (ValidationError, ConfigurationError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT
    except UpstreamProvisioningError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_UPSTREAM_ERROR
    return 0


if __name__ == "__main__":
    sys.exit(main())
