"""
Reference Catalog - Known mechanics, targeters, triggers and conditions.

The catalog is injected, read-only configuration. It is built once (from a
dict, a YAML/JSON file, or the built-in defaults) and never mutated, so one
instance can be shared by any number of validators and analyzers.

All lookups are case-insensitive and honour aliases.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping
import json
import logging

import yaml

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when catalog data cannot be loaded."""


class AttributeType(Enum):
    """Declared value types for mechanic attributes."""
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    TEXT = "text"
    CHOICE = "choice"


@dataclass(frozen=True)
class AttributeDefinition:
    """
    One attribute a mechanic accepts.

    Examples:
    - AttributeDefinition("amount", aliases=("a",), type=AttributeType.NUMBER, min_value=0)
    - AttributeDefinition("ignorearmor", aliases=("ia", "i"), type=AttributeType.BOOLEAN)
    """
    name: str
    aliases: tuple[str, ...] = ()
    type: AttributeType = AttributeType.TEXT
    required: bool = False
    min_value: float | None = None
    max_value: float | None = None
    choices: tuple[str, ...] = ()

    @property
    def all_names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)

    def check_value(self, value: str) -> str | None:
        """
        Check a raw attribute value against the declared type and range.

        Returns a description of the problem, or None if the value is fine.
        Placeholder values ("<caster.var.x>") cannot be checked statically
        and always pass.
        """
        if "<" in value and ">" in value:
            return None
        raw = value.strip().strip('"')

        if self.type == AttributeType.BOOLEAN:
            if raw.lower() not in ("true", "false"):
                return f"expected true/false, got '{value}'"
            return None

        if self.type == AttributeType.CHOICE:
            if self.choices and raw.lower() not in {c.lower() for c in self.choices}:
                return f"expected one of {', '.join(self.choices)}, got '{value}'"
            return None

        if self.type in (AttributeType.NUMBER, AttributeType.INTEGER):
            try:
                number = int(raw) if self.type == AttributeType.INTEGER else float(raw)
            except ValueError:
                return f"expected {self.type.value}, got '{value}'"
            if self.min_value is not None and number < self.min_value:
                return f"value {raw} is below the minimum {self.min_value:g}"
            if self.max_value is not None and number > self.max_value:
                return f"value {raw} is above the maximum {self.max_value:g}"
        return None


@dataclass(frozen=True)
class MechanicDefinition:
    """A mechanic and its attribute schema."""
    name: str
    aliases: tuple[str, ...] = ()
    category: str = "utility"
    attributes: tuple[AttributeDefinition, ...] = ()
    description: str = ""

    @property
    def all_names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)

    @property
    def required_attributes(self) -> list[AttributeDefinition]:
        return [a for a in self.attributes if a.required]

    def get_attribute(self, key: str) -> AttributeDefinition | None:
        """Find an attribute by name or alias (case-insensitive)."""
        key = key.lower()
        for attribute in self.attributes:
            if key in (n.lower() for n in attribute.all_names):
                return attribute
        return None


@dataclass(frozen=True)
class NamedEntry:
    """A targeter, trigger or condition name with its aliases."""
    name: str
    aliases: tuple[str, ...] = ()
    description: str = ""

    @property
    def all_names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


@dataclass(frozen=True)
class Catalog:
    """
    Read-only reference catalog.

    Usage:
        catalog = Catalog.from_dict(data)
        mechanic = catalog.get_mechanic("Damage")
        catalog.has_targeter("T")  # alias of Target
    """
    mechanics: tuple[MechanicDefinition, ...] = ()
    targeters: tuple[NamedEntry, ...] = ()
    triggers: tuple[NamedEntry, ...] = ()
    conditions: tuple[NamedEntry, ...] = ()
    version: str = ""

    _mechanic_index: Mapping[str, MechanicDefinition] = field(
        init=False, repr=False, compare=False
    )
    _targeter_index: Mapping[str, NamedEntry] = field(init=False, repr=False, compare=False)
    _trigger_index: Mapping[str, NamedEntry] = field(init=False, repr=False, compare=False)
    _condition_index: Mapping[str, NamedEntry] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_mechanic_index", _build_index(self.mechanics))
        object.__setattr__(self, "_targeter_index", _build_index(self.targeters))
        object.__setattr__(self, "_trigger_index", _build_index(self.triggers))
        object.__setattr__(self, "_condition_index", _build_index(self.conditions))

    def get_mechanic(self, name: str) -> MechanicDefinition | None:
        return self._mechanic_index.get(name.lower())

    def get_targeter(self, name: str) -> NamedEntry | None:
        return self._targeter_index.get(name.lower())

    def get_trigger(self, name: str) -> NamedEntry | None:
        return self._trigger_index.get(name.lower())

    def get_condition(self, name: str) -> NamedEntry | None:
        return self._condition_index.get(name.lower())

    def has_mechanic(self, name: str) -> bool:
        return self.get_mechanic(name) is not None

    def has_targeter(self, name: str) -> bool:
        return self.get_targeter(name) is not None

    def has_trigger(self, name: str) -> bool:
        return self.get_trigger(name) is not None

    def has_condition(self, name: str) -> bool:
        return self.get_condition(name) is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Catalog:
        """
        Build a catalog from plain data.

        Expected shape:
            mechanics: [{name, aliases, category, attributes: [{name, aliases,
                         type, required, min, max, choices}]}]
            targeters / triggers / conditions: [{name, aliases}] or ["name"]

        Raises CatalogError if the data is malformed.
        """
        if not isinstance(data, Mapping):
            raise CatalogError("Catalog data must be a mapping")
        try:
            return cls(
                mechanics=tuple(_mechanic_from_dict(m) for m in data.get("mechanics") or []),
                targeters=tuple(_entry_from_data(t) for t in data.get("targeters") or []),
                triggers=tuple(_entry_from_data(t) for t in data.get("triggers") or []),
                conditions=tuple(_entry_from_data(c) for c in data.get("conditions") or []),
                version=str(data.get("version", "")),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise CatalogError(f"Invalid catalog data: {exc}") from exc


def load_catalog(path: str | Path) -> Catalog:
    """
    Load a catalog from a YAML or JSON file.

    Raises CatalogError if the file is missing or malformed.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"Cannot read catalog file {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise CatalogError(f"Cannot parse catalog file {path}: {exc}") from exc

    catalog = Catalog.from_dict(data or {})
    logger.info(
        "Loaded catalog %s: %d mechanics, %d targeters, %d triggers, %d conditions",
        path, len(catalog.mechanics), len(catalog.targeters),
        len(catalog.triggers), len(catalog.conditions),
    )
    return catalog


# ============================================================================
# Helpers
# ============================================================================

def _build_index(entries) -> Mapping[str, Any]:
    index: dict[str, Any] = {}
    for entry in entries:
        for name in entry.all_names:
            key = name.lower()
            if key in index and index[key] is not entry:
                logger.debug("Catalog name %r is declared twice; keeping the first", name)
                continue
            index[key] = entry
    return MappingProxyType(index)


def _aliases(data: Mapping[str, Any]) -> tuple[str, ...]:
    aliases = data.get("aliases", data.get("alias", ()))
    if isinstance(aliases, str):
        aliases = [aliases]
    return tuple(str(a) for a in aliases or ())


def _entry_from_data(data: Any) -> NamedEntry:
    if isinstance(data, str):
        return NamedEntry(name=data)
    return NamedEntry(
        name=str(data["name"]),
        aliases=_aliases(data),
        description=str(data.get("description", "")),
    )


def _attribute_from_dict(data: Mapping[str, Any]) -> AttributeDefinition:
    return AttributeDefinition(
        name=str(data["name"]),
        aliases=_aliases(data),
        type=AttributeType(str(data.get("type", "text")).lower()),
        required=bool(data.get("required", False)),
        min_value=data.get("min"),
        max_value=data.get("max"),
        choices=tuple(str(c) for c in data.get("choices") or ()),
    )


def _mechanic_from_dict(data: Mapping[str, Any]) -> MechanicDefinition:
    return MechanicDefinition(
        name=str(data["name"]),
        aliases=_aliases(data),
        category=str(data.get("category", "utility")),
        attributes=tuple(_attribute_from_dict(a) for a in data.get("attributes") or []),
        description=str(data.get("description", "")),
    )
