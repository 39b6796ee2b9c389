"""Input validation and normalization helpers for namespace paths."""

from __future__ import annotations

import re

from libs.vault_namespace.exceptions import ValidationError

APP_NAME_MAX_LENGTH = 50

# Lowercase letters, digits, hyphens and slashes only
NAMESPACE_PATH_PATTERN = re.compile(r"^[a-z0-9/-]+$")


def validate_app_name(app_name: str) -> str:
    """Return ``app_name`` unchanged if it is 1-50 characters long.

    Raises:
        ValidationError: If the name is empty or too long
    """
    if not app_name:
        raise ValidationError("must not be empty", field="app_name", value=app_name)
    if len(app_name) > APP_NAME_MAX_LENGTH:
        raise ValidationError(
            f"must be at most {APP_NAME_MAX_LENGTH} characters (got {len(app_name)})",
            field="app_name",
            value=app_name,
        )
    return app_name


def trim_trailing_slash(path: str) -> str:
    return path.rstrip("/")


def check_path_segments(path: str, field: str) -> str:
    """Return ``path`` if it has no leading slash and no empty segments.

    Vault creates one namespace per segment, so an empty segment would become
    a request for a namespace with an empty name.

    Raises:
        ValidationError: If the path starts with a slash or contains "//"
    """
    if path.startswith("/") or "//" in path:
        raise ValidationError(
            "must not start with a slash or contain empty segments",
            field=field,
            value=path,
        )
    return path


def validate_manual_path(path: str) -> str:
    """Check a manual namespace override and return it with the trailing slash trimmed.

    The path must contain only lowercase letters, digits, hyphens and slashes,
    must not start with a slash and must not contain empty segments.

    Raises:
        ValidationError: If the override fails the charset or shape check
    """
    trimmed = trim_trailing_slash(path)
    if not trimmed:
        raise ValidationError("must not be empty or only slashes", field="manual_path", value=path)
    if not NAMESPACE_PATH_PATTERN.match(trimmed):
        raise ValidationError(
            "may only contain lowercase letters, digits, hyphens and slashes",
            field="manual_path",
            value=path,
        )
    return check_path_segments(trimmed, "manual_path")


def normalize_prefix(prefix: str) -> str:
    """Return ``prefix`` ending with exactly one "/" (empty stays empty).

    The prefix charset is not validated.
    """
    if not prefix:
        return ""
    stripped = prefix.rstrip("/")
    if not stripped:
        return ""
    return f"{stripped}/"
