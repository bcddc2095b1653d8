from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._container import Resolver
    from ._factory import Factory

    PostInitHook = Callable[[Any, Resolver], None]

T = TypeVar("T")


class Lifetime(Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class Binding:
    """Describes how instances for one target are produced.

    Created from a `BindingHandle` when a builder is applied to a container,
    and never changed afterwards.
    """

    target: Any
    implementation: Any
    lifetime: Lifetime = Lifetime.SINGLE
    eager: bool = False
    tags: frozenset[str] = frozenset()
    factory_type: type | None = None
    factory_delegate: Callable[[], Any] | None = None
    post_init: PostInitHook | None = None

    @property
    def is_single(self) -> bool:
        return self.lifetime is Lifetime.SINGLE


@dataclass
class BindingHandle(Generic[T]):
    """Fluent, mutable configuration returned by `Builder.bind`.

    Example:
      builder.bind(Repo).to(SqlRepo).as_multiple().add_tag("storage")

    """

    target: Any
    implementation: Any = None
    lifetime: Lifetime = Lifetime.SINGLE
    is_eager: bool = False
    tags: set[str] = field(default_factory=set)
    factory_type: type | None = None
    factory_delegate: Callable[[], Any] | None = None
    post_init: PostInitHook | None = None

    def __post_init__(self) -> None:
        if self.implementation is None:
            self.implementation = self.target

    def to(self, implementation: type[T]) -> BindingHandle[T]:
        """Select the concrete class constructed for the target."""
        self.implementation = implementation
        self.factory_type = None
        self.factory_delegate = None
        return self

    def as_single(self) -> BindingHandle[T]:
        self.lifetime = Lifetime.SINGLE
        return self

    def as_multiple(self) -> BindingHandle[T]:
        self.lifetime = Lifetime.MULTIPLE
        return self

    def eager(self) -> BindingHandle[T]:
        self.is_eager = True
        return self

    def lazy(self) -> BindingHandle[T]:
        self.is_eager = False
        return self

    def from_instance(self, instance: T) -> BindingHandle[T]:
        """Always hand out the given pre-built instance."""
        self.implementation = self.target
        self.factory_type = None
        self.factory_delegate = lambda: instance
        return self

    def from_factory(self, factory_type: type[Factory[T]]) -> BindingHandle[T]:
        """Delegate creation to `factory_type().create()`.

        The factory itself is resolved through the container, so it can have
        its own constructor dependencies.
        """
        self.factory_type = factory_type
        self.factory_delegate = None
        return self

    def from_callable(self, delegate: Callable[[], T]) -> BindingHandle[T]:
        self.implementation = self.target
        self.factory_type = None
        self.factory_delegate = delegate
        return self

    def add_tag(self, tag: str) -> BindingHandle[T]:
        self.tags.add(tag)
        return self

    def after_init(self, hook: PostInitHook) -> BindingHandle[T]:
        """Register `hook(instance, resolver)`, called once per created instance."""
        self.post_init = hook
        return self

    def freeze(self) -> Binding:
        return Binding(
            target=self.target,
            implementation=self.implementation,
            lifetime=self.lifetime,
            eager=self.is_eager,
            tags=frozenset(self.tags),
            factory_type=self.factory_type,
            factory_delegate=self.factory_delegate,
            post_init=self.post_init,
        )
