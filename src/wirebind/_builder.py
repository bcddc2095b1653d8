from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._binding import Binding, BindingHandle
from ._errors import DuplicateRegistrationError


if TYPE_CHECKING:
    from collections.abc import Mapping


T = TypeVar("T")


class Builder:
    """Collects bindings and named parameters for a `Container`.

    Nothing is resolved or validated here; the container reads the result in
    `Container.apply`.
    """

    def __init__(self) -> None:
        self._handles: list[BindingHandle[Any]] = []
        self._parameters: dict[str, object] = {}

    @overload
    def bind(self, target: type[T]) -> BindingHandle[T]: ...

    @overload
    def bind(self, target: Any) -> BindingHandle[Any]: ...

    def bind(self, target: Any) -> BindingHandle[Any]:
        """Start a binding for `target` (single, lazy, constructs `target` itself)."""
        handle: BindingHandle[Any] = BindingHandle(target)
        self._handles.append(handle)
        return handle

    def bind_parameter(self, name: str, value: object) -> None:
        """Register the value injected into constructor parameters called `name`."""
        if name in self._parameters:
            msg = f"Parameter {name!r} is already bound."
            raise DuplicateRegistrationError(msg)
        self._parameters[name] = value

    def build(self) -> list[Binding]:
        return [handle.freeze() for handle in self._handles]

    @property
    def parameters(self) -> Mapping[str, object]:
        return dict(self._parameters)
