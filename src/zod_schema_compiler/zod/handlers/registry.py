"""
Registry of type handlers.

Handlers are consulted in descending priority order. Sorting is stable,
so handlers with equal priority keep their registration order.
"""

from __future__ import annotations

import importlib
import logging

from pydantic import BaseModel, PrivateAttr

from ...engine.models import ResolvedValidationSet
from ...exceptions import ConfigurationError, NoHandlerFoundError
from .base import TypeHandler

logger = logging.getLogger(__name__)


class TypeHandlerRegistry(BaseModel):
    """
    Priority-ordered handler list.

    Example:
        registry = create_default_registry()
        registry.register(MoneyHandler())
        handler = registry.get_handler_for_property(node)
    """

    model_config = {"arbitrary_types_allowed": True}

    _handlers: list[TypeHandler] = PrivateAttr(default_factory=list)

    def register(self, handler: TypeHandler) -> None:
        """Register a handler and re-sort by priority."""
        self._handlers.append(handler)
        self._handlers.sort(key=lambda h: h.priority, reverse=True)
        logger.debug(f"Registered {handler!r}")

    def register_many(self, handlers: list[TypeHandler]) -> None:
        for handler in handlers:
            self.register(handler)

    def unregister(self, handler_cls: type[TypeHandler]) -> int:
        """Remove every handler of a class; returns how many were removed."""
        before = len(self._handlers)
        self._handlers = [h for h in self._handlers if type(h) is not handler_cls]
        return before - len(self._handlers)

    def clear(self) -> None:
        self._handlers = []

    def get_handlers(self) -> list[TypeHandler]:
        return list(self._handlers)

    def get_handler(self, inferred_type: str) -> TypeHandler:
        """
        First handler accepting an inferred type.

        Raises:
            NoHandlerFoundError: If no registered handler accepts the type
        """
        for handler in self._handlers:
            if handler.can_handle_type(inferred_type):
                return handler
        raise NoHandlerFoundError(None, inferred_type)

    def get_handler_for_property(self, node: ResolvedValidationSet) -> TypeHandler:
        """
        First handler accepting a node.

        Raises:
            NoHandlerFoundError: If no registered handler accepts the node
        """
        for handler in self._handlers:
            if handler.can_handle_property(node):
                logger.debug(f"{node.field_name}: {type(handler).__name__} selected")
                return handler
        raise NoHandlerFoundError(node.field_name, node.inferred_type)

    def load_custom_handlers(self, dotted_paths: list[str]) -> int:
        """
        Import and register handler classes named by ``package.module:ClassName``
        (or ``package.module.ClassName``) paths.

        Raises:
            ConfigurationError: If a path cannot be imported or is not a TypeHandler
        """
        for path in dotted_paths:
            module_name, sep, attribute = path.partition(":")
            if not sep:
                module_name, _, attribute = path.rpartition(".")
            try:
                handler_cls = getattr(importlib.import_module(module_name), attribute)
            except (ImportError, AttributeError, ValueError) as e:
                raise ConfigurationError(path, f"cannot import custom handler: {e}") from e
            if not (isinstance(handler_cls, type) and issubclass(handler_cls, TypeHandler)):
                raise ConfigurationError(path, "custom handler is not a TypeHandler subclass")
            self.register(handler_cls())
            logger.info(f"Loaded custom handler {path}")
        return len(dotted_paths)


def create_default_registry() -> TypeHandlerRegistry:
    """
    Create a TypeHandlerRegistry with the built-in handlers registered.

    Each compilation run gets its own registry, so custom handlers
    registered for one run never leak into another.
    """
    from .data_class import DataClassTypeHandler
    from .enum import EnumTypeHandler, InRuleTypeHandler
    from .universal import UniversalTypeHandler

    registry = TypeHandlerRegistry()
    registry.register_many(
        [
            InRuleTypeHandler(),
            EnumTypeHandler(),
            DataClassTypeHandler(),
            UniversalTypeHandler(),
        ]
    )
    return registry


__all__ = ["TypeHandlerRegistry", "create_default_registry"]
