from __future__ import annotations

from typing import TYPE_CHECKING

from ._tokens import Scope


if TYPE_CHECKING:
    from collections.abc import Iterator

    from ._tokens import Token


class TokenRegistry:
    """Tokens registered on one container, indexed by name and by target.

    The target index only covers non-transient tokens: resolving by class or
    factory is redirected to the named, cached path, and a transient token has
    no cached instance to redirect to.
    """

    def __init__(self, parent: TokenRegistry | None = None) -> None:
        self._parent = parent
        self._tokens: dict[str, Token] = {}
        self._names_by_target: dict[int, str] = {}

    def register(self, name: str, token: Token) -> None:
        self._tokens[name] = token
        if token.scope is not Scope.TRANSIENT:
            self._names_by_target[token.key] = name

    def lookup(self, name: str) -> Token | None:
        return self._tokens.get(name)

    def lookup_name_for_target(self, key: int) -> str | None:
        """Name `key` was registered under here or in the nearest ancestor registry."""
        name = self._names_by_target.get(key)
        if name is not None:
            return name
        if self._parent is not None:
            return self._parent.lookup_name_for_target(key)
        return None

    def items(self) -> Iterator[tuple[str, Token]]:
        return iter(self._tokens.items())

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __contains__(self, name: object) -> bool:
        return name in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)
