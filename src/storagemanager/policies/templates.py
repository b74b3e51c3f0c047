"""Policy template loading and rendering.

Templates are JSON files bundled in storagemanager/templates/ containing the
literal placeholders ${bucket}, ${organization} and ${space}.
"""

import json
import logging
from importlib import resources
from typing import Any

from storagemanager.errors import ResourceLoadError

logger = logging.getLogger(__name__)

_TEMPLATE_PACKAGE = "storagemanager.templates"

ROLE_TEMPLATES = {
    "admin": "iam_policy_space_admin_tpl.json",
    "trustee": "iam_policy_space_trustee_tpl.json",
    "user": "iam_policy_space_user_tpl.json",
    "supplier": "iam_policy_space_supplier_tpl.json",
}
SPACE_PUBLIC_TEMPLATE = "iam_policy_space_public_tpl.json"
ALL_PUBLIC_TEMPLATE = "iam_policy_space_all_public_tpl.json"


def read_template(name: str) -> str:
    """Return the literal text of a bundled template.

    Raises:
        ResourceLoadError: Template does not exist or cannot be read.
    """
    try:
        return resources.files(_TEMPLATE_PACKAGE).joinpath(name).read_text(encoding="utf-8")
    except (FileNotFoundError, OSError) as e:
        logger.error("Failed to load template %s: %s", name, e)
        raise ResourceLoadError(name) from e


def render_template(name: str, bucket: str, organization: str, space: str) -> str:
    """Load a template and substitute its placeholders verbatim."""
    return (
        read_template(name)
        .replace("${bucket}", bucket)
        .replace("${organization}", organization)
        .replace("${space}", space)
    )


def render_statements(name: str, bucket: str, organization: str, space: str) -> list[dict[str, Any]]:
    """Render a statement-fragment template (a JSON list of statements)."""
    text = render_template(name, bucket, organization, space)
    try:
        statements = json.loads(text)
    except json.JSONDecodeError as e:
        raise ResourceLoadError(f"{name}: {e}") from e
    if not isinstance(statements, list):
        raise ResourceLoadError(f"{name}: expected a list of statements")
    return statements
