"""Field-set rules for creating and partially updating a profile.

The store applies the result of ``build_profile_fields`` with ``$set`` and
``insert_defaults`` with ``$setOnInsert`` in one upsert, so the branch between
create and update is taken by MongoDB atomically. ``merge_profile`` is the
same rule applied to an in-memory document.
"""
import copy
from datetime import datetime, timezone
from typing import Any

PROFILE_FIELDS = ("company", "website", "location", "bio", "status", "githubusername")
SOCIAL_FIELDS = ("youtube", "facebook", "twitter", "instagram", "linkedin")


def split_skills(raw: str) -> list[str]:
    # Empty tokens (e.g. from a trailing comma) are kept.
    return [skill.strip() for skill in raw.split(",")]


def build_profile_fields(patch: dict[str, Any]) -> dict[str, Any]:
    """Return the fields an upsert sets, keyed by document path.

    Only fields present and non-empty in ``patch`` are included. Social links
    use dotted paths so each supplied link is set on its own and the others
    are left as they are.
    """
    fields: dict[str, Any] = {}
    for name in PROFILE_FIELDS:
        value = patch.get(name)
        if value:
            fields[name] = value

    skills = patch.get("skills")
    if skills:
        fields["skills"] = split_skills(skills)

    for name in SOCIAL_FIELDS:
        value = patch.get(name)
        if value:
            fields[f"social.{name}"] = value
    return fields


def insert_defaults(fields: dict[str, Any], now: datetime | None = None) -> dict[str, Any]:
    """Defaults a new profile gets for everything ``fields`` does not set."""
    defaults: dict[str, Any] = {
        "skills": [],
        "social": {},
        "experience": [],
        "education": [],
        "date": now or datetime.now(timezone.utc),
    }
    return {
        key: value
        for key, value in defaults.items()
        if not any(path == key or path.startswith(f"{key}.") for path in fields)
    }


def _set_path(document: dict[str, Any], path: str, value: Any) -> None:
    *parents, leaf = path.split(".")
    for part in parents:
        document = document.setdefault(part, {})
    document[leaf] = value


def merge_profile(existing: dict[str, Any] | None, patch: dict[str, Any]) -> dict[str, Any]:
    fields = build_profile_fields(patch)
    if existing is None:
        profile = insert_defaults(fields)
    else:
        profile = copy.deepcopy(existing)
        profile.setdefault("social", {})

    for path, value in fields.items():
        _set_path(profile, path, value)
    return profile
