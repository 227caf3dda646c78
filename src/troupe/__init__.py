"""Hierarchical dependency injection containers.

This package provides a small dependency injection runtime: containers map
token names to classes or factories, hand out instances according to a
lifecycle scope and can be chained so that a child container sees, and may
override, everything its ancestors register.

Exports:
- `Container`: Root and child containers; `resolve` builds and caches instances.
- `ContainerOptions`: Container configuration (default token laziness).
- `Scope`: Token lifecycles: singleton, scoped or transient.
- `Token`, `TokenOptions`, `Factory`: Declarative registrations.
- Token builders: `singleton`, `scoped`, `transient`, their `*_factory`
  variants, `factory`, `alias`, `value` and the `define_init` class decorator.
- `ResolutionError` and its subclasses `CircularDependencyError` and
  `UnregisteredTokenError`.
"""

from ._container import Container, ContainerOptions, Instances
from ._errors import CircularDependencyError, ResolutionError, UnregisteredTokenError
from ._tokens import (
    Factory,
    Scope,
    Token,
    TokenOptions,
    alias,
    define_init,
    factory,
    scoped,
    scoped_factory,
    singleton,
    singleton_factory,
    transient,
    transient_factory,
    value,
)


__all__ = [
    "CircularDependencyError",
    "Container",
    "ContainerOptions",
    "Factory",
    "Instances",
    "ResolutionError",
    "Scope",
    "Token",
    "TokenOptions",
    "UnregisteredTokenError",
    "alias",
    "define_init",
    "factory",
    "scoped",
    "scoped_factory",
    "singleton",
    "singleton_factory",
    "transient",
    "transient_factory",
    "value",
]
