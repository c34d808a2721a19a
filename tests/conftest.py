"""Shared test configuration for zod-schema-compiler tests.

Provides:
- An isolated environment (no user config file or config env var leaks in)
- The built-in English message catalog and services built on it
- Helpers that compile small rule maps end to end
"""

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from zod_schema_compiler.compiler import SchemaCompiler
from zod_schema_compiler.config import CONFIG_ENV_VAR
from zod_schema_compiler.engine.messages import MessageResolutionService, YamlMessageCatalog
from zod_schema_compiler.engine.models import SchemaSource
from zod_schema_compiler.engine.validation_resolver import ValidationResolver
from zod_schema_compiler.zod.node_compiler import ZodNodeCompiler


@pytest.fixture(autouse=True)
def isolated_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> Iterator[None]:
    """Keep ~/.zod-schema/config.yml and ZOD_SCHEMA_CONFIG of the developer out of tests."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.delenv("ZOD_SCHEMA_LOG_LEVEL", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path_factory.mktemp("home")))
    yield


@pytest.fixture(scope="session")
def catalog() -> YamlMessageCatalog:
    """Built-in English messages."""
    return YamlMessageCatalog()


@pytest.fixture
def message_service(catalog: YamlMessageCatalog) -> MessageResolutionService:
    return MessageResolutionService(catalog)


@pytest.fixture
def resolver(message_service: MessageResolutionService) -> ValidationResolver:
    return ValidationResolver(message_service)


@pytest.fixture
def node_compiler() -> ZodNodeCompiler:
    return ZodNodeCompiler()


@pytest.fixture
def compile_fields(catalog: YamlMessageCatalog) -> Callable[..., dict[str, str]]:
    """
    Compile the properties of a single rule map.

    Usage:
        fields = compile_fields({"age": "nullable|integer|min:0"})
        fields["age"]  # z.number(...)...nullable().optional()

    Extra keyword arguments are passed to SchemaSource (messages, attributes,
    metadata, fragments, ...).
    """

    def _compile(rules: dict[str, Any], **source_kwargs: Any) -> dict[str, str]:
        class_name = source_kwargs.pop("class_name", "App.Http.Requests.TestRequest")
        source = SchemaSource(class_name=class_name, rules=rules, **source_kwargs)
        compiler = SchemaCompiler([source], message_source=catalog)
        schema = compiler.extract()[0]
        return {
            prop.name: compiler.node_compiler.compile_property(prop) for prop in schema.properties
        }

    return _compile


@pytest.fixture
def make_compiler(catalog: YamlMessageCatalog) -> Callable[..., SchemaCompiler]:
    """Build a SchemaCompiler over sources using the built-in catalog."""

    def _make(sources: list[SchemaSource], config: Any = None) -> SchemaCompiler:
        return SchemaCompiler(sources, config, message_source=catalog)

    return _make
