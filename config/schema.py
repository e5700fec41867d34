"""drf-spectacular hooks.

The API is mounted twice (``/api/v1/`` and the legacy ``/api/`` prefix used by
the older frontend). Only the versioned routes are documented, and each
operation is tagged by the feature area its path belongs to.
"""

from __future__ import annotations

from typing import Any

VERSIONED_PREFIX = "/api/v1/"

# Most specific prefix first
PATTERN_TAGS = [
    ("/api/v1/auth/jwt", "JWT Authentication"),
    ("/api/v1/auth/", "Authentication"),
    ("/api/v1/users", "Users"),
    ("/api/v1/guides", "Guides"),
    ("/api/v1/tours", "Tours"),
    ("/api/v1/chat", "Chat"),
    ("/api/v1/notifications", "Notifications"),
    ("/api/v1/audit", "Audit"),
]

OPERATION_KEYS = frozenset({"get", "post", "put", "patch", "delete", "head", "options"})


def assign_group_tag(path: str) -> str | None:
    return next((tag for prefix, tag in PATTERN_TAGS if path.startswith(prefix)), None)


def is_legacy_route(path: str) -> bool:
    return path.startswith("/api/") and not path.startswith(VERSIONED_PREFIX)


def drop_legacy_routes(endpoints, **kwargs):
    """Preprocessing hook: hide the unversioned ``/api/`` duplicates."""
    return [endpoint for endpoint in endpoints if not is_legacy_route(endpoint[0])]


def group_tags(result: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
    """Postprocessing hook: give every operation exactly one feature tag."""
    used: list[str] = []
    for path, path_item in result.get("paths", {}).items():
        tag = assign_group_tag(path)
        if tag is None:
            continue
        for method, operation in path_item.items():
            if method in OPERATION_KEYS and isinstance(operation, dict):
                operation["tags"] = [tag]
        if tag not in used:
            used.append(tag)

    declared = result.setdefault("tags", [])
    known = {entry.get("name") for entry in declared}
    ordered = [tag for _, tag in PATTERN_TAGS if tag in used and tag not in known]
    declared.extend({"name": tag} for tag in ordered)
    return result
