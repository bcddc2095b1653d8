"""Type-shape helpers used by the resolution engine."""

from __future__ import annotations

import inspect
import logging
import types
import typing
import uuid
from enum import Enum
from typing import Annotated, Any, Protocol, cast, get_args, get_origin, get_type_hints

from ._errors import UnresolvableTypeError


logger = logging.getLogger(__name__)

SIMPLE_TYPES: frozenset[type] = frozenset({bool, int, float, complex, str, bytes, uuid.UUID})


class InjectAll:
    """Marks a sequence parameter that receives every registered implementation.

    Example:
      def __init__(self, handlers: Annotated[list[Handler], InjectAll]): ...
      def __init__(self, handlers: Annotated[list, InjectAll(Handler)]): ...

    """

    def __init__(self, capability: Any = None) -> None:
        self.capability = capability

    def __repr__(self) -> str:
        return f"InjectAll({self.capability!r})"


def is_simple_type(tp: object) -> bool:
    """Simple types are injected by parameter name instead of by type."""
    if not inspect.isclass(tp):
        return False
    return tp in SIMPLE_TYPES or issubclass(tp, Enum)


if hasattr(typing, "is_protocol"):

    def is_protocol(tp: object) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def is_protocol(tp: object) -> bool:
        """Detect whether 'tp' is a typing.Protocol subclass (safe)."""
        return inspect.isclass(tp) and getattr(tp, "_is_protocol", False) and tp is not cast("type", Protocol)


def unresolvable_reason(token: object) -> str | None:
    """Explain why `token` cannot be built without a binding, or None if it can."""
    if not inspect.isclass(token):
        return "it is not a class"
    if is_simple_type(token):
        return "it is a simple type; register a named parameter instead"
    if is_protocol(token):
        return "it is a protocol"
    if inspect.isabstract(token):
        return "it is abstract"
    return None


def inject_all_capability(hint: object) -> Any:
    """Return the element capability of an `InjectAll` parameter, or None."""
    if get_origin(hint) is not Annotated:
        return None

    inner, *metadata = get_args(hint)
    marker = next((m for m in metadata if m is InjectAll or isinstance(m, InjectAll)), None)
    if marker is None:
        return None

    if isinstance(marker, InjectAll) and marker.capability is not None:
        return marker.capability

    args = get_args(inner)
    if not args:
        msg = f"Cannot infer the element type of {inner!r}; use InjectAll(<type>)"
        raise UnresolvableTypeError(msg)
    return args[0]


def unwrap_optional(hint: object) -> object:
    """`Optional[X]` and `X | None` resolve as `X`."""
    if get_origin(hint) in (typing.Union, types.UnionType):
        args = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def implements(token: object, capability: object) -> bool:
    """Whether a registered identity satisfies `capability`.

    Matches equality, subclassing (including ABC registration and runtime
    protocols), and open generics: `Handler` is satisfied by `Handler[int]`
    and by any class declaring `Handler[...]` among its bases.
    """
    if token == capability:
        return True

    origin = get_origin(token)
    if origin is not None:
        # parameterised identity such as Handler[int]
        return origin is capability or (inspect.isclass(origin) and _is_subclass(origin, capability))

    if not inspect.isclass(token):
        return False

    if get_origin(capability) is not None:
        return any(base == capability for base in _generic_bases(token))

    return _is_subclass(token, capability)


def _is_subclass(cls: type, capability: object) -> bool:
    if not inspect.isclass(capability):
        return False
    if capability in cls.__mro__:
        return True
    try:
        return issubclass(cls, capability)
    except TypeError:
        # non runtime-checkable protocols refuse issubclass()
        return False


def _generic_bases(cls: type) -> list[object]:
    bases: list[object] = []
    for klass in cls.__mro__:
        bases.extend(klass.__dict__.get("__orig_bases__", ()))
    return bases


def get_init_type_hints(cls: type) -> dict[str, Any]:
    try:
        init = inspect.getattr_static(cls, "__init__")
        hints = get_type_hints(init, include_extras=True)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)
        hints = {}

    return hints
