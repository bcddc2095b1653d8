from __future__ import annotations


class ContainerError(RuntimeError):
    """Base class for every error raised by the container."""


class DuplicateRegistrationError(ContainerError, KeyError):
    """A binding target or parameter name was registered twice."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return RuntimeError.__str__(self)


class AlreadyInitializedError(ContainerError):
    pass


class ResolutionError(ContainerError):
    pass


class UnresolvedParameterError(ResolutionError):
    """A simple-typed constructor parameter has no registered value."""


class CircularReferenceError(ResolutionError):
    """A type was requested again while it was still being resolved."""

    def __init__(self, chain: list[object]) -> None:
        self.chain = chain
        names = " -> ".join(_token_name(token) for token in chain)
        super().__init__(f"Circular reference detected: {names}")


class UnresolvableTypeError(ResolutionError):
    pass


class ConstructionError(ResolutionError):
    """Wraps an exception raised while building an instance by reflection."""


def _token_name(token: object) -> str:
    return getattr(token, "__qualname__", None) or repr(token)
