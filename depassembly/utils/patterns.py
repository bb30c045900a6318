"""Pattern matching for artifact identities and archive entry paths."""

from __future__ import annotations

import re
from collections.abc import Iterable
from fnmatch import fnmatchcase
from functools import lru_cache

from depassembly.model.artifact import identity_forms


def match_identity(pattern: str, identity: str) -> bool:
    """Return True when ``pattern`` matches an artifact identity string.

    Patterns are ``:``-separated; each segment is a glob (``*``, ``?``) matched
    against the corresponding identity segment. Shorter patterns match as a
    prefix, so ``com.foo:*`` matches every artifact in group ``com.foo``.
    """
    segments = pattern.strip().split(":")
    for form in identity_forms(identity):
        if len(segments) > len(form):
            continue
        if all(fnmatchcase(value, glob) for value, glob in zip(form, segments)):
            return True
    return False


def match_any_identity(pattern: str, identities: Iterable[str]) -> bool:
    return any(match_identity(pattern, identity) for identity in identities)


@lru_cache(maxsize=256)
def _ant_regex(pattern: str) -> re.Pattern[str]:
    normalized = pattern.replace("\\", "/").lstrip("/")
    if normalized.endswith("/"):
        normalized += "**"

    parts: list[str] = []
    index = 0
    while index < len(normalized):
        if normalized.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
        elif normalized.startswith("**", index):
            parts.append(".*")
            index += 2
        elif normalized[index] == "*":
            parts.append("[^/]*")
            index += 1
        elif normalized[index] == "?":
            parts.append("[^/]")
            index += 1
        else:
            parts.append(re.escape(normalized[index]))
            index += 1
    return re.compile("".join(parts) + r"\Z")


def ant_match(pattern: str, path: str) -> bool:
    """Match an archive-relative path against an Ant-style pattern."""
    return _ant_regex(pattern).match(path.replace("\\", "/").lstrip("/")) is not None


def path_selected(path: str, includes: Iterable[str], excludes: Iterable[str]) -> bool:
    """Apply include then exclude Ant patterns; empty includes select everything."""
    include_list = list(includes)
    if include_list and not any(ant_match(pattern, path) for pattern in include_list):
        return False
    return not any(ant_match(pattern, path) for pattern in excludes)
