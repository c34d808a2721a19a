"""
YAML schema definition files.

A definition file lists the schema sources of one run:

```yaml
schemas:
  - class: App.Data.AddressData
    type: data
    rules:
      street: required|string|max:255
      city: required|string

  - class: App.Data.UserData
    type: data
    rules:
      email: [required, email]
      address: required
      tags: array|max:5
      tags.*: string|distinct
    messages:
      email.required: We need your email.
    attributes:
      email: email address
    metadata:
      address: {is_nested_object: true, nested_class: App.Data.AddressData}
    fragments:
      tags: ".refine((val) => val.length > 0)"

  - class: App.Data.ProfileData
    type: data
    rules:
      contact: email
    inherit:
      contact: {class: App.Data.UserData, field: email}
```
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .engine.models import FieldMetadata, InheritValidationFrom, SchemaFragment, SchemaSource
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _inheritance(value: Any) -> InheritValidationFrom:
    if isinstance(value, str):
        return InheritValidationFrom(source_class=value)
    if isinstance(value, dict):
        return InheritValidationFrom(
            source_class=value.get("class") or value.get("source_class"),
            source_field=value.get("field") or value.get("source_field"),
        )
    raise ValueError(f"inherit entries must be a class name or a mapping, got {value!r}")


def _fragment(value: Any) -> SchemaFragment:
    if isinstance(value, str):
        return SchemaFragment.literal(value)
    if isinstance(value, dict) and "code" in value:
        if value.get("mode") == "append":
            return SchemaFragment.append(value["code"])
        if value.get("mode") == "replace":
            return SchemaFragment.replace(value["code"])
        return SchemaFragment.literal(value["code"])
    raise ValueError(f"fragments must be code strings or {{code, mode}} mappings, got {value!r}")


def parse_source(entry: dict[str, Any]) -> SchemaSource:
    """
    Build a SchemaSource from one ``schemas:`` entry.

    Raises:
        ValueError: If the entry is malformed (pydantic's ValidationError included)
    """
    if not isinstance(entry, dict) or "class" not in entry:
        raise ValueError(f"each schema entry needs a 'class' key, got {entry!r}")

    return SchemaSource(
        class_name=entry["class"],
        type=entry.get("type", "rules"),
        schema_name=entry.get("schema_name"),
        rules=entry.get("rules") or {},
        messages=entry.get("messages") or {},
        attributes=entry.get("attributes") or {},
        metadata={
            name: FieldMetadata(**(meta or {})) for name, meta in (entry.get("metadata") or {}).items()
        },
        inheritance={
            name: _inheritance(value) for name, value in (entry.get("inherit") or {}).items()
        },
        fragments={name: _fragment(value) for name, value in (entry.get("fragments") or {}).items()},
    )


def load_definitions(path: str | Path) -> list[SchemaSource]:
    """
    Load schema sources from a YAML definition file.

    Raises:
        ConfigurationError: If the file is unreadable, not valid YAML, or malformed
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            document = yaml.safe_load(f) or {}
        if not isinstance(document, dict) or not isinstance(document.get("schemas"), list):
            raise ValueError("definition file must contain a 'schemas' list")
        sources = [parse_source(entry) for entry in document["schemas"]]
    except OSError as e:
        raise ConfigurationError(str(path), f"cannot read definition file: {e}") from e
    except (yaml.YAMLError, ValidationError, ValueError) as e:
        raise ConfigurationError(str(path), str(e)) from e

    logger.info(f"Loaded {len(sources)} schema definitions from {path}")
    return sources


__all__ = ["load_definitions", "parse_source"]
