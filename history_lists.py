from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

HISTORY_LISTS = ("experience", "education")


def check_list_name(list_name: str) -> str:
    if list_name not in HISTORY_LISTS:
        raise ValueError(f"Unknown history list: {list_name!r}")
    return list_name


def new_entry(entry: dict[str, Any]) -> dict[str, Any]:
    return {"_id": ObjectId(), **{key: value for key, value in entry.items() if key != "_id"}}


def prepend_entry(entries: list[dict[str, Any]], entry: dict[str, Any]) -> list[dict[str, Any]]:
    """Return a new list with ``entry`` first, most recent entries leading.

    The entry always gets a fresh ``_id``; any id it carries is dropped.
    """
    return [new_entry(entry), *entries]


def _find_index(entries: list[dict[str, Any]], entry_id: ObjectId) -> int:
    for index, entry in enumerate(entries):
        if entry.get("_id") == entry_id:
            return index
    return -1


def remove_entry(entries: list[dict[str, Any]], entry_id: str | ObjectId) -> list[dict[str, Any]]:
    """Return a new list without the entry whose id is ``entry_id``.

    An id that is malformed or not in the list leaves the list unchanged.
    """
    try:
        object_id = entry_id if isinstance(entry_id, ObjectId) else ObjectId(entry_id)
    except (InvalidId, TypeError):
        return list(entries)

    index = _find_index(entries, object_id)
    if index < 0:
        return list(entries)
    return entries[:index] + entries[index + 1 :]
