from __future__ import annotations

from typing import Any


MISSING: Any = object()


def singleton_key(name: str, container_id: int) -> str:
    # The defining container id keeps same-named singletons of unrelated subtrees apart.
    return f"{name}@{container_id}"


class InstanceCache:
    """Built instances keyed by token name (scoped) or by `singleton_key` (root only).

    Lookups test presence, not truthiness, so a cached `None` or `0` is still a hit.
    """

    def __init__(self) -> None:
        self._instances: dict[str, Any] = {}

    def get(self, key: str, default: Any = MISSING) -> Any:
        return self._instances.get(key, default)

    def store(self, key: str, instance: object) -> None:
        self._instances[key] = instance

    def __contains__(self, key: object) -> bool:
        return key in self._instances

    def __len__(self) -> int:
        return len(self._instances)
