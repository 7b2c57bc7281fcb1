"""Reference catalog - read-only mechanic/targeter/trigger/condition data."""

from .model import (
    AttributeDefinition,
    AttributeType,
    Catalog,
    CatalogError,
    MechanicDefinition,
    NamedEntry,
    load_catalog,
)
from .builtin import default_catalog

__all__ = [
    "AttributeDefinition",
    "AttributeType",
    "Catalog",
    "CatalogError",
    "MechanicDefinition",
    "NamedEntry",
    "load_catalog",
    "default_catalog",
]
