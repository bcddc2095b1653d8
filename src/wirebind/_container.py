from __future__ import annotations

import inspect
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Annotated,
    Any,
    Protocol,
    TypeVar,
    get_args,
    get_origin,
    overload,
    runtime_checkable,
)

from ._binding import Binding, Lifetime
from ._errors import (
    AlreadyInitializedError,
    CircularReferenceError,
    ConstructionError,
    ContainerError,
    DuplicateRegistrationError,
    UnresolvableTypeError,
    UnresolvedParameterError,
    _token_name,
)
from ._factory import Factory
from ._introspection import (
    get_init_type_hints,
    implements,
    inject_all_capability,
    is_simple_type,
    unresolvable_reason,
    unwrap_optional,
)


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ._builder import Builder

T = TypeVar("T")

_EMPTY = object()


@runtime_checkable
class Resolver(Protocol):
    """Read-only resolution surface shared by the container and its hooks."""

    @overload
    def resolve(self, token: type[T]) -> T: ...

    @overload
    def resolve(self, token: Any) -> Any: ...

    def resolve(self, token: Any) -> Any: ...

    def resolve_all(self, capability: Any) -> list[Any]: ...

    def resolve_by_tag(self, tag: str, capability: Any = None) -> list[Any]: ...


@dataclass
class Definition:
    binding: Binding
    cached_instance: object = _EMPTY  # cached singleton

    @property
    def has_instance(self) -> bool:
        return self.cached_instance is not _EMPTY

    def has_tag(self, tag: str) -> bool:
        return tag in self.binding.tags


class ResolutionContext:
    """Targets currently being built by one top-level resolve call.

    A fresh context is created for every public `resolve*` call and passed
    down through each nested resolution.
    """

    def __init__(self) -> None:
        self._in_flight: list[Any] = []

    @contextmanager
    def entering(self, token: Any) -> Iterator[None]:
        if token in self._in_flight:
            raise CircularReferenceError([*self._in_flight, token])

        self._in_flight.append(token)
        try:
            yield
        finally:
            self._in_flight.pop()


class Container:
    """Resolution engine over a table of bindings.

    - apply one or more builders, then `init()` once
    - resolve with constructor injection
    - lifetimes: single / multiple
    - auto-resolution of unregistered concrete classes.
    """

    def __init__(self) -> None:
        self._definitions: dict[Any, Definition] = {}
        self._parameters: dict[str, object] = {}
        self._initialized = False
        self._lock = threading.RLock()

    def apply(self, builder: Builder) -> None:
        """Register every binding and named parameter collected by `builder`.

        Fails without registering anything if a target or parameter name is
        already known.
        """
        staged: dict[Any, Definition] = {}
        parameters = builder.parameters

        with self._lock:
            for binding in builder.build():
                if binding.target in self._definitions or binding.target in staged:
                    msg = f"{_token_name(binding.target)} is already registered."
                    raise DuplicateRegistrationError(msg)
                staged[binding.target] = Definition(binding)

            for name in parameters:
                if name in self._parameters:
                    msg = f"Parameter {name!r} is already registered."
                    raise DuplicateRegistrationError(msg)

            self._definitions.update(staged)
            self._parameters.update(parameters)

        logger.debug("Applied %d bindings and %d parameters", len(staged), len(parameters))

    def init(self) -> None:
        """Promote factory types to bindings and build eager instances.

        A failed `init()` may be retried: promotion skips factories already
        registered and eager singletons already built are kept.
        """
        with self._lock:
            if self._initialized:
                msg = "Container.init() has already been called."
                raise AlreadyInitializedError(msg)

            self._promote_factories()

            for definition in list(self._definitions.values()):
                if definition.binding.eager:
                    self._instantiate_eager(definition)

            self._initialized = True

    @property
    def initialized(self) -> bool:
        return self._initialized

    def _promote_factories(self) -> None:
        promoted: dict[Any, Definition] = {}
        for definition in self._definitions.values():
            factory_type = definition.binding.factory_type
            if factory_type is None or factory_type in self._definitions or factory_type in promoted:
                continue

            promoted[factory_type] = Definition(Binding(target=factory_type, implementation=factory_type))
            logger.debug("Registered factory %s as a single binding", _token_name(factory_type))

        self._definitions.update(promoted)

    def _instantiate_eager(self, definition: Definition) -> None:
        binding = definition.binding
        if binding.lifetime is Lifetime.MULTIPLE:
            logger.warning(
                "Eager binding %s has a multiple lifetime; the instance built during init is not kept",
                _token_name(binding.target),
            )

        logger.debug("Eagerly resolving %s", _token_name(binding.target))
        self._resolve(binding.target, ResolutionContext())

    @overload
    def resolve(self, token: type[T]) -> T: ...

    @overload
    def resolve(self, token: Any) -> Any: ...

    def resolve(self, token: Any) -> Any:
        """Resolve the token to an instance.

        - If a binding exists: use it (cached instance, factory or constructor).
        - If no binding exists and the token is a concrete class: build it by
          constructor injection without registering it.
        """
        return self._resolve(token, ResolutionContext())

    def resolve_all(self, capability: Any) -> list[Any]:
        """Resolve every registered target implementing `capability`.

        `capability` may be a class, an ABC, a protocol, a parameterised
        generic such as `Handler[int]`, or an open generic such as `Handler`.
        """
        return self._resolve_all(capability, ResolutionContext())

    @overload
    def resolve_by_tag(self, tag: str, capability: type[T]) -> list[T]: ...

    @overload
    def resolve_by_tag(self, tag: str, capability: Any = ...) -> list[Any]: ...

    def resolve_by_tag(self, tag: str, capability: Any = None) -> list[Any]:
        """Resolve every target tagged `tag`, optionally only those implementing `capability`."""
        return self._resolve_by_tag(tag, ResolutionContext(), capability)

    def _resolve(self, token: Any, ctx: ResolutionContext) -> Any:
        with self._lock, ctx.entering(token):
            definition = self._definitions.get(token)
            if definition is None:
                return self._auto_resolve(token, ctx)
            return self._resolve_definition(definition, ctx)

    def _resolve_all(self, capability: Any, ctx: ResolutionContext) -> list[Any]:
        with self._lock:
            targets = [target for target in self._definitions if implements(target, capability)]
            return [self._resolve(target, ctx) for target in targets]

    def _resolve_by_tag(self, tag: str, ctx: ResolutionContext, capability: Any = None) -> list[Any]:
        with self._lock:
            targets = [
                target
                for target, definition in self._definitions.items()
                if definition.has_tag(tag) and (capability is None or implements(target, capability))
            ]
            return [self._resolve(target, ctx) for target in targets]

    def _resolve_definition(self, definition: Definition, ctx: ResolutionContext) -> Any:
        if definition.has_instance:
            return definition.cached_instance

        binding = definition.binding
        instance = self._create(binding, ctx)

        if binding.post_init is not None:
            binding.post_init(instance, _BoundResolver(self, ctx))

        # Cache if single
        if binding.is_single:
            definition.cached_instance = instance

        return instance

    def _auto_resolve(self, token: Any, ctx: ResolutionContext) -> Any:
        reason = unresolvable_reason(token)
        if reason is not None:
            msg = f"Cannot resolve {_token_name(token)}: no binding is registered and {reason}."
            raise UnresolvableTypeError(msg)

        logger.debug("No binding for %s, constructing it directly", _token_name(token))
        transient = Binding(target=token, implementation=token, lifetime=Lifetime.MULTIPLE)
        return self._create(transient, ctx)

    def _create(self, binding: Binding, ctx: ResolutionContext) -> Any:
        if binding.factory_delegate is not None:
            return binding.factory_delegate()

        if binding.factory_type is not None:
            factory = self._resolve(binding.factory_type, ctx)
            if not isinstance(factory, Factory):
                msg = f"{_token_name(binding.factory_type)} has no create() method and cannot act as a factory"
                raise ConstructionError(msg)
            return factory.create()

        return Constructor(self, ctx).construct(binding.implementation)

    def _parameter(self, name: str) -> object:
        return self._parameters[name]

    def _is_registered(self, token: Any) -> bool:
        return token in self._definitions


class _BoundResolver:
    """Resolver handed to post-init hooks; keeps the caller's cycle guard."""

    def __init__(self, container: Container, ctx: ResolutionContext) -> None:
        self._container = container
        self._ctx = ctx

    def resolve(self, token: Any) -> Any:
        return self._container._resolve(token, self._ctx)  # noqa: SLF001

    def resolve_all(self, capability: Any) -> list[Any]:
        return self._container._resolve_all(capability, self._ctx)  # noqa: SLF001

    def resolve_by_tag(self, tag: str, capability: Any = None) -> list[Any]:
        return self._container._resolve_by_tag(tag, self._ctx, capability)  # noqa: SLF001


class Constructor:
    def __init__(self, container: Container, ctx: ResolutionContext) -> None:
        self._container = container
        self._ctx = ctx

    def construct(self, cls: type[T]) -> T:
        # Handler[int] is built through Handler.__init__
        origin = get_origin(cls) or cls
        try:
            if origin.__init__ is object.__init__:
                return cls()

            sig = inspect.signature(origin)
            args, kwargs = self._collect_arguments(origin, sig)
            return cls(*args, **kwargs)
        except ContainerError:
            raise
        except Exception as e:
            msg = f"Failed to construct {_token_name(cls)}: {e}"
            raise ConstructionError(msg) from e

    def _collect_arguments(self, cls: type, sig: inspect.Signature) -> tuple[list[Any], dict[str, Any]]:
        hints = get_init_type_hints(cls)
        args, kwargs = [], {}

        for name, p in sig.parameters.items():
            # *args / **kwargs are never injected
            if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
                continue

            value = self.resolve_param(cls, name, p, hints.get(name, p.empty))
            if p.kind is p.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[name] = value

        return args, kwargs

    def resolve_param(self, cls: type, name: str, p: inspect.Parameter, ann: Any) -> Any:
        """Resolving param.

        1. `InjectAll` sequence: every registered implementation.
        2. simple type or no annotation: named parameter, then default.
        3. anything else: nested resolution, or the default when the
           annotation cannot be resolved at all.
        """
        capability = inject_all_capability(ann)
        if capability is not None:
            return self._container._resolve_all(capability, self._ctx)  # noqa: SLF001

        if get_origin(ann) is Annotated:
            ann = get_args(ann)[0]
        ann = unwrap_optional(ann)

        if ann is p.empty or is_simple_type(ann):
            try:
                return self._container._parameter(name)  # noqa: SLF001
            except KeyError:
                if p.default is not p.empty:
                    return p.default

                ann_repr = getattr(ann, "__name__", repr(ann)) if ann is not p.empty else "no-annotation"
                msg = (
                    f"Cannot satisfy constructor parameter '{name}' for {cls.__name__}: "
                    f"no parameter named '{name}' is registered (annotation: {ann_repr})."
                )
                raise UnresolvedParameterError(msg) from None

        if (
            p.default is not p.empty
            and not self._container._is_registered(ann)  # noqa: SLF001
            and unresolvable_reason(ann) is not None
        ):
            return p.default

        return self._container._resolve(ann, self._ctx)  # noqa: SLF001
