from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._cache import MISSING, InstanceCache, singleton_key
from ._errors import CircularDependencyError, UnregisteredTokenError
from ._registry import TokenRegistry
from ._tokens import Factory, Scope, Token, instantiate, target_key


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from typing_extensions import Self

    T = TypeVar("T")

    RegisterToken = Token | type | Factory
    Resolvable = str | type | Factory | Token


@dataclass(frozen=True)
class ContainerOptions:
    # Default laziness of the container's own tokens; a token's own `lazy` wins.
    lazy: bool = False


class Instances(Mapping[str, Any]):
    """Read-only view handed to constructors and factories.

    Reading `instances[name]` resolves `name` on the owning container.
    Iteration yields the names registered on the container and its ancestors,
    nearest first. Membership checks registration and builds nothing.
    """

    __slots__ = ("_container",)

    def __init__(self, container: Container) -> None:
        self._container = container

    def __getitem__(self, name: str) -> Any:
        if not isinstance(name, str):
            msg = f"Token names must be strings, got {name!r}"
            raise TypeError(msg)
        return self._container.resolve(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._container._all_names())  # noqa: SLF001

    def __len__(self) -> int:
        return len(self._container._all_names())  # noqa: SLF001

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._container._locate(name) is not None  # noqa: SLF001

    def get(self, name: str, default: Any = None) -> Any:
        # Only an unregistered `name` falls back; errors from its dependencies propagate.
        if name not in self:
            return default
        return self[name]

    def __repr__(self) -> str:
        return f"Instances({list(self)!r})"


class Container:
    """Dependency injection container.

    - tokens are registered once, at construction, as a name -> token mapping
    - lifetimes: singleton / scoped / transient
    - child containers see every token of their ancestors and may override them
    - non-transient tokens are built eagerly unless marked lazy.
    """

    def __init__(
        self,
        tokens: Mapping[str, RegisterToken] | None,
        parent: Container | None,
        options: ContainerOptions | None,
        *,
        _from_factory: bool = False,
    ) -> None:
        if not _from_factory:
            msg = "Containers must be created via Container.create() or Container.create_with_parent()"
            raise RuntimeError(msg)

        self._parent = parent
        self._root: Container = parent._root if parent is not None else self
        self._options = options if options is not None else ContainerOptions()
        self._lock = threading.RLock()
        self._last_id = 0  # ids are issued by the root only
        self._id = self._root._issue_id()

        self._registry = TokenRegistry(parent._registry if parent is not None else None)
        self._cache = InstanceCache()
        self._singletons = InstanceCache()  # root only
        self._resolution_chain: list[str] = []
        self._lazy: dict[str, bool] = {}
        self._instances = Instances(self)

        for name, register_token in (tokens or {}).items():
            token = _as_token(name, register_token)
            self._registry.register(name, token)
            self._lazy[name] = token.options.lazy if token.options.lazy is not None else self._options.lazy

        logger.debug(
            "Created container %d (parent: %s) with %d token(s)",
            self._id,
            parent._id if parent is not None else None,
            len(self._registry),
        )

        # Only this container's own tokens; ancestors built theirs already.
        for name, token in self._registry.items():
            if token.scope is not Scope.TRANSIENT and not self._lazy[name]:
                logger.debug("Container %d: eagerly resolving '%s'", self._id, name)
                self.resolve(name)

    @classmethod
    def create(
        cls,
        tokens: Mapping[str, RegisterToken] | None = None,
        options: ContainerOptions | None = None,
    ) -> Self:
        """Create a root container.

        Example:
          container = Container.create({
              "db": singleton(Database),
              "repo": Repository,  # bare classes are registered as scoped
          })

        """
        return cls(tokens, None, options, _from_factory=True)

    @classmethod
    def create_with_parent(
        cls,
        parent: Container,
        tokens: Mapping[str, RegisterToken] | None = None,
        options: ContainerOptions | None = None,
    ) -> Self:
        """Create a child container that can resolve everything `parent` can.

        Options default to the parent's options.
        """
        return cls(tokens, parent, options if options is not None else parent._options, _from_factory=True)

    def create_child(
        self,
        tokens: Mapping[str, RegisterToken] | None = None,
        options: ContainerOptions | None = None,
    ) -> Container:
        return type(self).create_with_parent(self, tokens, options)

    @property
    def id(self) -> int:
        return self._id

    @property
    def parent(self) -> Container | None:
        return self._parent

    @property
    def root(self) -> Container:
        return self._root

    @property
    def options(self) -> ContainerOptions:
        return self._options

    @property
    def instances(self) -> Instances:
        return self._instances

    @overload
    def resolve(self, reference: type[T]) -> T: ...

    @overload
    def resolve(self, reference: str | Factory | Token) -> Any: ...

    def resolve(self, reference: Resolvable) -> Any:
        """Resolve a token name, a class, a factory or a token to an instance.

        - `scoped`: one instance per resolving container.
        - `singleton`: one instance per defining container, shared with its descendants.
        - `transient`: a new instance on every resolution.

        A class or factory registered (non-transient) on this container or an
        ancestor resolves to the same instance as its token name. Anything else
        is built on the spot and not cached.
        """
        if isinstance(reference, str):
            return self._resolve_name(reference)

        target = _target_of(reference)
        key = target_key(target)
        name = self._registry.lookup_name_for_target(key)
        if name is not None:
            located = self._locate(name)
            # a descendant may shadow the name with a different target
            if located is not None and located[0].key == key:
                return self._resolve_name(name)

        logger.debug("Container %d: building unregistered %r without caching", self._id, target)
        return instantiate(target, self._instances)

    def _resolve_name(self, name: str) -> Any:
        with self._lock:
            instance = self._cache.get(name)
            if instance is not MISSING:
                return instance

            if name in self._resolution_chain:
                logger.debug("Container %d: circular dependency on '%s'", self._id, name)
                raise CircularDependencyError(name, self._resolution_chain)

            self._resolution_chain.append(name)
            try:
                instance, scope = self._token_instance(name)
                if scope is Scope.SCOPED:
                    self._cache.store(name, instance)
                return instance
            finally:
                self._resolution_chain.pop()

    def _token_instance(self, name: str) -> tuple[Any, Scope]:
        located = self._locate(name)
        if located is None:
            logger.debug("Container %d: no token registered for '%s'", self._id, name)
            raise UnregisteredTokenError(name, self._resolution_chain)
        token, owner = located

        if token.scope is Scope.SINGLETON:
            key = singleton_key(name, owner._id)
            root = self._root
            with root._lock:
                instance = root._singletons.get(key)
                if instance is MISSING:
                    instance = self._build(name, token, owner)
                    root._singletons.store(key, instance)
            return instance, token.scope

        return self._build(name, token, owner), token.scope

    def _build(self, name: str, token: Token, owner: Container) -> Any:
        # Built with this container's view so overrides below the defining container apply.
        if token.options.before_init is not None:
            token.options.before_init()
        instance = token.build(self._instances)
        if token.options.after_init is not None:
            token.options.after_init(instance)

        logger.debug(
            "Container %d: built '%s' (%s, defined on container %d)",
            self._id,
            name,
            token.scope.value,
            owner._id,
        )
        return instance

    def _locate(self, name: str) -> tuple[Token, Container] | None:
        """Nearest token registered under `name`, with the container defining it."""
        container: Container | None = self
        while container is not None:
            token = container._registry.lookup(name)
            if token is not None:
                return token, container
            container = container._parent
        return None

    def _all_names(self) -> list[str]:
        names: dict[str, None] = {}
        container: Container | None = self
        while container is not None:
            names.update(dict.fromkeys(container._registry))
            container = container._parent
        return list(names)

    def _issue_id(self) -> int:
        with self._lock:
            issued = self._last_id
            self._last_id += 1
            return issued

    def __repr__(self) -> str:
        parent_id = self._parent._id if self._parent is not None else None
        return f"Container(id={self._id}, parent={parent_id}, tokens={list(self._registry)!r})"


def _as_token(name: str, register_token: RegisterToken) -> Token:
    if not isinstance(name, str):
        msg = f"Token names must be strings, got {name!r}"
        raise TypeError(msg)

    if isinstance(register_token, Token):
        return register_token
    if inspect.isclass(register_token) or isinstance(register_token, Factory):
        return Token(Scope.SCOPED, register_token)

    msg = f"Cannot register {register_token!r} as '{name}': expected a Token, a class or a Factory"
    raise TypeError(msg)


def _target_of(reference: type | Factory | Token) -> type | Factory:
    if isinstance(reference, Token):
        return reference.target
    if inspect.isclass(reference) or isinstance(reference, Factory):
        return reference

    msg = f"Cannot resolve {reference!r}: expected a token name, a class, a Factory or a Token"
    raise TypeError(msg)
