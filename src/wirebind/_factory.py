from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable


T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class Factory(Protocol[T_co]):
    """Capability of building instances on behalf of a binding.

    Bound with `Builder.bind(Foo).from_factory(FooFactory)`. The container
    resolves `FooFactory` like any other service and calls `create()` each
    time a new `Foo` is needed.
    """

    def create(self) -> T_co: ...
