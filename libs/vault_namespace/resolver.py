"""
Namespace Path Resolver.

Computes the Vault namespace path for an application from a set of optional
identifiers. The resolver is a pure function: no I/O, no environment lookups
and no randomness. The random suffix, when used, is generated once upstream
(see libs.vault_namespace.suffix) and passed in.

Precedence (first match wins):
    1. manual_path                      -> manual_path (trailing slash trimmed)
    2. organization + team + app id     -> {prefix}{org}/{team}/{app_id}/{app_name}
    3. app id (or organization) alone   -> {prefix}{app_id}/{app_name}
    4. use_random_suffix                -> {prefix}{app_name}-{suffix}
    5. default                          -> {prefix}{app_name}

The app identifier is ``app_id`` when set, otherwise ``organization_id``.
``app_id`` always wins; the two are never combined in one segment. When the
organization id stands in for the app identifier under rule 2 it is not
repeated, since it already leads the path.

Example:
    >>> resolve_namespace_path(
    ...     NamespacePathInputs(
    ...         app_name="api-service",
    ...         organization_id="acme-corp-uuid",
    ...         team_id="payments-team-uuid",
    ...         prefix="production/",
    ...     )
    ... )
    'production/acme-corp-uuid/payments-team-uuid/api-service'
"""

from __future__ import annotations

from libs.vault_namespace.exceptions import ValidationError
from libs.vault_namespace.inputs import NamespacePathInputs, ResolverOptions, ScopingStrategy
from libs.vault_namespace.validation import (
    check_path_segments,
    normalize_prefix,
    trim_trailing_slash,
    validate_app_name,
    validate_manual_path,
)


def resolve_app_identifier(inputs: NamespacePathInputs) -> str:
    """Return ``app_id`` if set, else ``organization_id`` (possibly empty)."""
    return inputs.app_id or inputs.organization_id


def _resolve_manual_path(manual_path: str, strict_validation: bool) -> str:
    if strict_validation:
        return validate_manual_path(manual_path)
    trimmed = trim_trailing_slash(manual_path)
    if not trimmed:
        raise ValidationError(
            "must not be empty or only slashes", field="manual_path", value=manual_path
        )
    return check_path_segments(trimmed, "manual_path")


def random_suffix_applies(inputs: NamespacePathInputs) -> bool:
    """True when the random suffix rule decides the path for ``inputs``.

    A manual path or any app identifier takes precedence and discards the suffix.
    """
    return (
        inputs.use_random_suffix
        and not inputs.manual_path
        and not resolve_app_identifier(inputs)
    )


def resolve_namespace_path(
    inputs: NamespacePathInputs,
    options: ResolverOptions | None = None,
) -> str:
    """Resolve the namespace path for ``inputs``.

    Args:
        inputs: Identifiers for this provisioning run
        options: Scoping strategy and strict-validation switch.
            Defaults to composite scoping with strict validation.

    Returns:
        Slash-delimited namespace path without leading or trailing slash

    Raises:
        ValidationError: app_name is empty or longer than 50 characters,
            the manual path fails validation (strict mode), or the random
            suffix flag is set without a suffix value
    """
    options = options or ResolverOptions()
    app_name = validate_app_name(inputs.app_name)

    if inputs.manual_path:
        return _resolve_manual_path(inputs.manual_path, options.strict_validation)

    prefix = normalize_prefix(inputs.prefix)
    app_identifier = resolve_app_identifier(inputs)

    if options.strategy is ScopingStrategy.APP_ID_OVERRIDE and inputs.app_id:
        return f"{prefix}{inputs.app_id}/{app_name}"

    if inputs.organization_id and inputs.team_id and app_identifier:
        if inputs.app_id:
            return f"{prefix}{inputs.organization_id}/{inputs.team_id}/{inputs.app_id}/{app_name}"
        return f"{prefix}{inputs.organization_id}/{inputs.team_id}/{app_name}"

    if app_identifier:
        return f"{prefix}{app_identifier}/{app_name}"

    if inputs.use_random_suffix:
        if not inputs.random_suffix_value:
            raise ValidationError(
                "required when use_random_suffix is enabled",
                field="random_suffix_value",
                value="",
            )
        return f"{prefix}{app_name}-{inputs.random_suffix_value}"

    return f"{prefix}{app_name}"


def namespace_segments(path: str) -> list[str]:
    """Return the cumulative namespace paths leading to ``path``.

    Vault creates nested namespaces one level at a time, so each entry must
    exist before the next can be created.

    Example:
        >>> namespace_segments("production/acme/api")
        ['production', 'production/acme', 'production/acme/api']
    """
    parts = [part for part in path.strip("/").split("/") if part]
    return ["/".join(parts[: index + 1]) for index in range(len(parts))]
