from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Iterable


class ResolutionError(RuntimeError):
    """Base class for errors raised while resolving a token."""

    def __init__(self, msg: str, dependency: str, chain: Iterable[str] = ()) -> None:
        super().__init__(msg)
        self.dependency = dependency
        self.chain = tuple(chain)


class CircularDependencyError(ResolutionError):
    def __init__(self, dependency: str, chain: Iterable[str]) -> None:
        chain = (*chain, dependency)
        msg = f"Circular dependency '{dependency}' found while resolving {' => '.join(chain)}"
        super().__init__(msg, dependency, chain)


class UnregisteredTokenError(ResolutionError, LookupError):
    # LookupError rather than KeyError so Mapping.get() on the instance view
    # does not hide a missing dependency.
    def __init__(self, dependency: str, chain: Iterable[str] = ()) -> None:
        msg = (
            f"Unresolved dependency '{dependency}', "
            "did you register this token in this container or in a parent container?"
        )
        super().__init__(msg, dependency, chain)
