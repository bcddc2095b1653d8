import unittest
import uuid
from enum import Enum
from typing import Protocol

import pytest

from wirebind import Builder, Container, UnresolvedParameterError


class Color(Enum):
    RED = "red"
    BLUE = "blue"


class TestNamedParameterResolution(unittest.TestCase):
    builder: Builder
    cont: Container

    def setUp(self):
        self.builder = Builder()
        self.cont = Container()

    def start(self):
        self.cont.apply(self.builder)
        self.cont.init()

    def test_resolve_injects_registered_string_parameter(self):
        class ParameterClass:
            def __init__(self, name: str):
                self.name = name

        self.builder.bind(ParameterClass)
        self.builder.bind_parameter("name", "test")
        self.start()

        assert self.cont.resolve(ParameterClass).name == "test"

    def test_resolve_without_registered_parameter_raises(self):
        class ParameterClass:
            def __init__(self, name: str):
                self.name = name

        self.builder.bind(ParameterClass)
        self.start()

        with pytest.raises(UnresolvedParameterError) as ctx:
            self.cont.resolve(ParameterClass)
        assert "Cannot satisfy constructor parameter 'name'" in str(ctx.value)

    def test_resolve_injects_every_simple_type_by_name(self):
        token = uuid.uuid4()

        class Settings:
            def __init__(
                self,
                port: int,
                ratio: float,
                debug: bool,
                host: str,
                secret: bytes,
                instance_id: uuid.UUID,
                color: Color,
            ):
                self.values = (port, ratio, debug, host, secret, instance_id, color)

        for name, value in [
            ("port", 8080),
            ("ratio", 0.5),
            ("debug", True),
            ("host", "localhost"),
            ("secret", b"key"),
            ("instance_id", token),
            ("color", Color.BLUE),
        ]:
            self.builder.bind_parameter(name, value)
        self.start()

        settings = self.cont.resolve(Settings)
        assert settings.values == (8080, 0.5, True, "localhost", b"key", token, Color.BLUE)

    def test_resolve_prefers_named_parameter_over_default_value(self):
        class WithDefault:
            def __init__(self, port: int = 5555):
                self.port = port

        self.builder.bind_parameter("port", 1234)
        self.start()

        assert self.cont.resolve(WithDefault).port == 1234

    def test_resolve_uses_default_when_parameter_not_registered(self):
        class WithDefault:
            def __init__(self, port: int = 5555):
                self.port = port

        self.start()

        assert self.cont.resolve(WithDefault).port == 5555

    def test_unannotated_parameter_is_looked_up_by_name(self):
        class NoAnnotation:
            def __init__(self, db):
                self.db = db

        self.builder.bind_parameter("db", "sqlite://")
        self.start()

        assert self.cont.resolve(NoAnnotation).db == "sqlite://"

    def test_unannotated_parameter_without_value_raises(self):
        class NoAnnotation:
            def __init__(self, db):
                self.db = db

        self.start()

        with pytest.raises(UnresolvedParameterError) as ctx:
            self.cont.resolve(NoAnnotation)
        assert "no-annotation" in str(ctx.value)

    def test_type_annotation_wins_over_parameter_with_same_name(self):
        class DB: ...

        class Repo:
            def __init__(self, db: DB):
                self.db = db

        self.builder.bind_parameter("db", "not-a-db")
        self.start()

        assert isinstance(self.cont.resolve(Repo).db, DB)

    def test_default_is_used_for_unresolvable_dependency(self):
        class Tracer(Protocol):
            def trace(self) -> None: ...

        class Cache: ...

        class Service:
            def __init__(self, tracer: Tracer = None, cache: Cache = None):
                self.tracer = tracer
                self.cache = cache

        self.start()

        service = self.cont.resolve(Service)
        assert service.tracer is None
        assert isinstance(service.cache, Cache)
