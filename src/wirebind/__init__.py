"""Small inversion-of-control container.

This package turns a declarative set of bindings into a live object graph:
constructor injection, single/multiple lifetimes, named primitive
parameters, tagged lookup and construction through factories.

Exports:
- `Builder`: collects bindings (`bind`) and named parameters (`bind_parameter`).
- `Container`: applies builders, runs eager initialization and resolves
  instances (`resolve`, `resolve_all`, `resolve_by_tag`).
- `Factory`: protocol for classes that build instances on behalf of a binding.
- `InjectAll`: `Annotated` marker for parameters receiving every registered
  implementation of a type.
- `Lifetime`: single (cached) or multiple (new instance per resolution).
"""

from ._binding import Binding, BindingHandle, Lifetime
from ._builder import Builder
from ._container import Container, Resolver
from ._errors import (
    AlreadyInitializedError,
    CircularReferenceError,
    ConstructionError,
    ContainerError,
    DuplicateRegistrationError,
    ResolutionError,
    UnresolvableTypeError,
    UnresolvedParameterError,
)
from ._factory import Factory
from ._introspection import InjectAll


__all__ = [
    "AlreadyInitializedError",
    "Binding",
    "BindingHandle",
    "Builder",
    "CircularReferenceError",
    "ConstructionError",
    "Container",
    "ContainerError",
    "DuplicateRegistrationError",
    "Factory",
    "InjectAll",
    "Lifetime",
    "ResolutionError",
    "Resolver",
    "UnresolvableTypeError",
    "UnresolvedParameterError",
]
