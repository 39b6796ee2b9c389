"""
Input model for namespace path resolution.

NamespacePathInputs and ResolverOptions are plain frozen values: they are
assembled once per provisioning run (usually from Settings) and passed by
value into the resolver. Nothing in this package reads the environment.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ScopingStrategy(str, Enum):
    """How identity tokens are combined into the namespace path.

    COMPOSITE_SCOPING: organization, team and app identifiers are combined
        into a hierarchical path ``{org}/{team}/{app_id}/{app_name}``.
    APP_ID_OVERRIDE: a non-empty app identifier replaces the organization
        and team scoping entirely, giving ``{app_id}/{app_name}``.
    """

    COMPOSITE_SCOPING = "composite"
    APP_ID_OVERRIDE = "app_id_override"

    @classmethod
    def parse(cls, value: str | ScopingStrategy) -> ScopingStrategy:
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        aliases = {
            "composite": cls.COMPOSITE_SCOPING,
            "composite_scoping": cls.COMPOSITE_SCOPING,
            "app_id_override": cls.APP_ID_OVERRIDE,
            "appid_override": cls.APP_ID_OVERRIDE,
            "override": cls.APP_ID_OVERRIDE,
        }
        if normalized not in aliases:
            raise ValueError(
                f"Unknown scoping strategy: {value!r} "
                f"(expected one of: {', '.join(s.value for s in cls)})"
            )
        return aliases[normalized]


@dataclass(frozen=True)
class NamespacePathInputs:
    """Identifiers the namespace path is computed from.

    Attributes:
        app_name: Application name (required, 1-50 characters)
        manual_path: Explicit namespace path, wins over everything else
        app_id: Application identity token
        organization_id: Organization identity token (fallback app identity)
        team_id: Team identity token
        prefix: Path prefix, normalized to end with a single "/"
        use_random_suffix: Append ``-{random_suffix_value}`` to the app name
        random_suffix_value: Lowercase hex token generated upstream
    """

    app_name: str
    manual_path: str = ""
    app_id: str = ""
    organization_id: str = ""
    team_id: str = ""
    prefix: str = ""
    use_random_suffix: bool = False
    random_suffix_value: str = ""


@dataclass(frozen=True)
class ResolverOptions:
    """Resolver behaviour switches.

    strict_validation rejects manual paths outside ``[a-z0-9/-]``; with it
    disabled the override is used as given (trailing slash trimmed).
    """

    strategy: ScopingStrategy = ScopingStrategy.COMPOSITE_SCOPING
    strict_validation: bool = True
