"""Validation message catalogs and resolution."""

from .catalog import MessageSource, YamlMessageCatalog
from .nested import NestedMessageHandler
from .resolver import MessageResolutionService, normalize_dependent_field

__all__ = [
    "MessageSource",
    "YamlMessageCatalog",
    "NestedMessageHandler",
    "MessageResolutionService",
    "normalize_dependent_field",
]
