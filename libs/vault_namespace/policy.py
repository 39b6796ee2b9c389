"""
ACL policy rendering for the application namespace.

Policies are Jinja2 templates with three variables: ``{{ app_name }}``,
``{{ mount_path }}`` and ``{{ data_path }}``. The default template ships with
the package (templates/app_policy.hcl.j2); a custom template file can be
supplied through VAULT_NS_POLICY_TEMPLATE.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    TemplateSyntaxError,
    UndefinedError,
)

from libs.vault_namespace.exceptions import ValidationError

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
DEFAULT_TEMPLATE_NAME = "app_policy.hcl.j2"
DEFAULT_TEMPLATE_PATH = TEMPLATE_DIR / DEFAULT_TEMPLATE_NAME

TEMPLATE_VARIABLES = frozenset({"app_name", "mount_path", "data_path"})

_environment = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


def load_policy_template(path: str | Path | None = None) -> str:
    """Read a policy template, falling back to the packaged default.

    Raises:
        ValidationError: If the template file does not exist or is empty
    """
    if path:
        template_path = Path(path)
        if not template_path.is_file():
            raise ValidationError(
                f"policy template not found at {template_path}",
                field="policy_template",
                value=str(template_path),
            )
        text = template_path.read_text(encoding="utf-8")
    else:
        template_path = DEFAULT_TEMPLATE_PATH
        try:
            text, _, _ = _environment.loader.get_source(_environment, DEFAULT_TEMPLATE_NAME)
        except TemplateNotFound as e:
            raise ValidationError(
                f"policy template not found at {template_path}",
                field="policy_template",
                value=str(template_path),
            ) from e

    if not text.strip():
        raise ValidationError(
            f"policy template at {template_path} is empty",
            field="policy_template",
            value=str(template_path),
        )
    return text


def policy_name_for(app_name: str) -> str:
    return f"{app_name}-policy"


def render_policy(template: str, app_name: str, mount_path: str, data_path: str) -> str:
    """Render an ACL policy body.

    Args:
        template: Jinja2 template text using ``app_name``, ``mount_path``, ``data_path``
        app_name: Application name
        mount_path: KV v2 mount path inside the namespace (e.g., "kv")
        data_path: Sub-path under the mount the application may access

    Returns:
        The rendered HCL policy

    Raises:
        ValidationError: If the template references an unknown variable
            or does not parse
    """
    values = {
        "app_name": app_name,
        "mount_path": mount_path.strip("/"),
        "data_path": data_path.strip("/"),
    }
    try:
        rendered = _environment.from_string(template).render(values)
    except UndefinedError as e:
        raise ValidationError(
            f"unknown placeholder: {e.message} "
            f"(allowed: {', '.join(sorted(TEMPLATE_VARIABLES))})",
            field="policy_template",
        ) from e
    except TemplateSyntaxError as e:
        raise ValidationError(
            f"malformed template at line {e.lineno}: {e.message}",
            field="policy_template",
        ) from e

    logger.debug(
        "Rendered policy template",
        extra={"app_name": app_name, "mount_path": values["mount_path"]},
    )
    return rendered
