"""
Path syntax of the shared document + applying a path-update map to a document.

A path is a dot-delimited string addressing a nested field, e.g. 'players.<playerId>.effects.poison'.
An update map {path: value} is applied all-or-nothing: every path is checked before anything is written.
(Placed in core as both the mutation builder and every store implementation need it)
"""

from copy import deepcopy
from typing import Any, Final

from src.core.exceptions import InvalidPathError

SEPARATOR: Final = "."


class _Delete:
    """Sentinel type: writing DELETE to a path removes that field (and its whole subtree)."""

    _instance = None

    def __new__(cls) -> "_Delete":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DELETE"

    def __deepcopy__(self, memo: dict) -> "_Delete":
        return self


DELETE: Final = _Delete()

PathUpdates = dict[str, Any]


def join_path(*segments: str) -> str:
    for segment in segments:
        _check_segment(segment)
    return SEPARATOR.join(segments)


def split_path(path: str) -> list[str]:
    segments = path.split(SEPARATOR)
    for segment in segments:
        _check_segment(segment, path)
    return segments


def apply_path_updates(document: dict[str, Any], updates: PathUpdates) -> dict[str, Any]:
    """
    Return a NEW document with all updates applied. The input document is left untouched.

    * intermediate mappings are created on demand
    * DELETE on a missing field is a no-op
    * writing through something that is not a mapping fails the whole batch (InvalidPathError)
    """
    result = deepcopy(document)
    # Validate first, so a bad path cannot leave half the batch applied.
    parsed = [(split_path(path), value) for path, value in updates.items()]

    for segments, value in parsed:
        parent = result
        *parents, leaf = segments
        for position, segment in enumerate(parents):
            child = parent.get(segment)
            if child is None:
                if value is DELETE:
                    parent = None
                    break
                child = parent[segment] = {}
            elif not isinstance(child, dict):
                raise InvalidPathError(
                    f"Cannot write below {SEPARATOR.join(segments[: position + 1])!r}: not a mapping."
                )
            parent = child

        if parent is None:
            continue
        if value is DELETE:
            parent.pop(leaf, None)
        else:
            parent[leaf] = deepcopy(value)
    return result


def _check_segment(segment: str, path: str | None = None) -> None:
    if not isinstance(segment, str) or not segment or SEPARATOR in segment:
        where = f" in path {path!r}" if path is not None else ""
        raise InvalidPathError(f"Invalid path segment {segment!r}{where}.")
