import logging
from functools import lru_cache
from typing import Any

import profile_store
from errors import ProfileNotFound
from github_repos import GithubRepoLookup, load_github_settings
from history_lists import check_list_name, prepend_entry, remove_entry
from profile_merge import build_profile_fields, insert_defaults

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_repo_lookup() -> GithubRepoLookup:
    return GithubRepoLookup(load_github_settings())


def get_profile_by_owner(owner_id: str) -> dict:
    profile = profile_store.get_profile_by_owner(owner_id)
    if not profile:
        raise ProfileNotFound()
    return profile


def get_profile_by_id(profile_id: str) -> dict:
    profile = profile_store.get_profile_by_id(profile_id)
    if not profile:
        raise ProfileNotFound("Profile not found")
    return profile


def get_profile_by_user_id(user_id: str) -> dict:
    # Malformed ids resolve to no profile, same as unknown ones.
    profile = profile_store.get_profile_by_owner(user_id)
    if not profile:
        raise ProfileNotFound("Profile not found")
    return profile


def list_profiles() -> list[dict]:
    return profile_store.list_profiles()


def upsert_profile(owner_id: str, patch: dict[str, Any]) -> dict:
    fields = build_profile_fields(patch)
    profile = profile_store.upsert_profile(owner_id, fields, insert_defaults(fields))
    logger.info("Upserted profile for user=%s fields=%s", owner_id, sorted(fields))
    return profile


def delete_owner(owner_id: str) -> None:
    profile_store.delete_owner(owner_id)


def add_history_entry(owner_id: str, list_name: str, entry: dict[str, Any]) -> dict:
    """Put ``entry`` at the front of the owner's experience or education list.

    The whole list is read, changed and written back, so two concurrent
    changes to the same owner's list may lose one of them.
    """
    check_list_name(list_name)
    doc = profile_store.load_profile_document(owner_id)
    if not doc:
        raise ProfileNotFound()

    entries = prepend_entry(doc.get(list_name, []), entry)
    profile = profile_store.set_history_list(owner_id, list_name, entries)
    if not profile:
        raise ProfileNotFound()
    return profile


def remove_history_entry(owner_id: str, list_name: str, entry_id: str) -> dict:
    check_list_name(list_name)
    doc = profile_store.load_profile_document(owner_id)
    if not doc:
        raise ProfileNotFound()

    current = doc.get(list_name, [])
    entries = remove_entry(current, entry_id)
    if len(entries) == len(current):
        logger.info("No %s entry id=%s for user=%s", list_name, entry_id, owner_id)
    profile = profile_store.set_history_list(owner_id, list_name, entries)
    if not profile:
        raise ProfileNotFound()
    return profile


def fetch_github_repos(username: str) -> list[dict]:
    return get_repo_lookup().fetch_repos(username)
