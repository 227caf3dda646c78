from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar


if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    T = TypeVar("T")
    C = TypeVar("C", bound=type)

    InstanceView = Mapping[str, Any]
    Initializer = Callable[[InstanceView], Any]


class Scope(Enum):
    SINGLETON = "singleton"
    SCOPED = "scoped"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class Factory:
    """Wraps a callable that builds an instance from the container's instance view."""

    init: Initializer

    def __post_init__(self) -> None:
        if not callable(self.init):
            msg = f"Factory initializer must be callable, got {self.init!r}"
            raise TypeError(msg)


@dataclass(frozen=True)
class TokenOptions:
    lazy: bool | None = None  # None: fall back to the container option
    before_init: Callable[[], None] | None = None
    after_init: Callable[[Any], None] | None = None


@dataclass(frozen=True)
class Token:
    """A registration: how to build one named dependency and how long it lives.

    `target` is either a class (built through its `init` classmethod or
    staticmethod when it has one, otherwise with no arguments) or a `Factory`.
    """

    scope: Scope
    target: type | Factory
    options: TokenOptions = field(default_factory=TokenOptions)

    def __post_init__(self) -> None:
        if not isinstance(self.scope, Scope):
            msg = f"Token scope must be a Scope, got {self.scope!r}"
            raise TypeError(msg)
        if not (inspect.isclass(self.target) or isinstance(self.target, Factory)):
            msg = f"Token target must be a class or a Factory, got {self.target!r}"
            raise TypeError(msg)

    @property
    def key(self) -> int:
        return target_key(self.target)

    def build(self, instances: InstanceView) -> Any:
        return instantiate(self.target, instances)


def target_key(target: type | Factory) -> int:
    """Identity a target is indexed under: the class itself or the factory callable.

    Keyed by `id()` so unhashable callables (e.g. dataclass instances with
    `__call__`) can be registered, and equal but distinct callables stay apart.
    The registry holds the token, which keeps the id valid.
    """
    if isinstance(target, Factory):
        return id(target.init)
    return id(target)


def instantiate(target: type | Factory, instances: InstanceView) -> Any:
    if isinstance(target, Factory):
        return target.init(instances)

    init = inspect.getattr_static(target, "init", None)
    if isinstance(init, (classmethod, staticmethod)):
        return target.init(instances)  # type: ignore[attr-defined]
    return target()


def _options(
    lazy: bool | None,
    before_init: Callable[[], None] | None,
    after_init: Callable[[Any], None] | None,
) -> TokenOptions:
    return TokenOptions(lazy=lazy, before_init=before_init, after_init=after_init)


def singleton(
    cls: type,
    *,
    lazy: bool | None = None,
    before_init: Callable[[], None] | None = None,
    after_init: Callable[[Any], None] | None = None,
) -> Token:
    """Class token shared by the defining container and all of its descendants."""
    return Token(Scope.SINGLETON, cls, _options(lazy, before_init, after_init))


def singleton_factory(
    fn: Initializer,
    *,
    lazy: bool | None = None,
    before_init: Callable[[], None] | None = None,
    after_init: Callable[[Any], None] | None = None,
) -> Token:
    return Token(Scope.SINGLETON, Factory(fn), _options(lazy, before_init, after_init))


def scoped(
    cls: type,
    *,
    lazy: bool | None = None,
    before_init: Callable[[], None] | None = None,
    after_init: Callable[[Any], None] | None = None,
) -> Token:
    """Class token with one instance per resolving container."""
    return Token(Scope.SCOPED, cls, _options(lazy, before_init, after_init))


def scoped_factory(
    fn: Initializer,
    *,
    lazy: bool | None = None,
    before_init: Callable[[], None] | None = None,
    after_init: Callable[[Any], None] | None = None,
) -> Token:
    return Token(Scope.SCOPED, Factory(fn), _options(lazy, before_init, after_init))


factory = scoped_factory


def transient(
    cls: type,
    *,
    before_init: Callable[[], None] | None = None,
    after_init: Callable[[Any], None] | None = None,
) -> Token:
    """Class token rebuilt on every resolution. Transient tokens are never built eagerly."""
    return Token(Scope.TRANSIENT, cls, _options(None, before_init, after_init))


def transient_factory(
    fn: Initializer,
    *,
    before_init: Callable[[], None] | None = None,
    after_init: Callable[[Any], None] | None = None,
) -> Token:
    return Token(Scope.TRANSIENT, Factory(fn), _options(None, before_init, after_init))


def alias(name: str) -> Token:
    """Transient token that returns whatever `name` resolves to in the resolving container."""
    if not isinstance(name, str):
        msg = f"Alias target must be a token name, got {name!r}"
        raise TypeError(msg)
    return Token(Scope.TRANSIENT, Factory(lambda instances: instances[name]))


def value(obj: object) -> Token:
    """Singleton token for a pre-built object."""
    return Token(Scope.SINGLETON, Factory(lambda _: obj))


def define_init(*names: str) -> Callable[[C], C]:
    """Class decorator mapping each positional constructor parameter to a token name.

    Example:
      @define_init("db", "logger")
      class Repo:
          def __init__(self, db, logger): ...

    is equivalent to declaring

      @classmethod
      def init(cls, instances):
          return cls(instances["db"], instances["logger"])

    """

    def decorate(cls: C) -> C:
        try:
            inspect.signature(cls).bind(*names)
        except TypeError as e:
            msg = f"Token names {names!r} don't match {cls.__name__} signature: {e}"
            raise TypeError(msg) from e

        def init(klass: type[T], instances: InstanceView) -> T:
            return klass(*(instances[name] for name in names))

        cls.init = classmethod(init)  # type: ignore[attr-defined]
        return cls

    return decorate
