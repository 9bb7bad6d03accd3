"""First-occurrence-wins deduplication."""

from collections.abc import Callable, Hashable, Iterable
from typing import TypeVar

from scopeauthz.authz.models import Permission, Role

T = TypeVar("T")


def deduplicate(items: Iterable[T], key: Callable[[T], Hashable]) -> list[T]:
    """Drop items whose key was already seen, preserving input order."""
    seen: set[Hashable] = set()
    result = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        result.append(item)
    return result


def dedupe_permissions(permissions: Iterable[Permission]) -> list[Permission]:
    return deduplicate(permissions, lambda p: p.key)


def dedupe_roles(roles: Iterable[Role]) -> list[Role]:
    return deduplicate(roles, lambda r: r.name)
