"""
Item Catalog Module

Read-only lookup of data specification items (classes, object properties and
datatype properties) by IRI.

Public Interface:
- ItemCatalog: lookup contract consumed by the substructure merger
- InMemoryItemCatalog: catalog over already built items
- RdfItemCatalog: catalog over an rdflib graph with OWL declarations
- Domain models: ClassItem, ObjectPropertyItem, DatatypePropertyItem
"""

from .domain import (
    ItemType, ClassItem, ObjectPropertyItem, DatatypePropertyItem,
    DataSpecificationItem, CatalogStats
)
from .store import ItemCatalog, InMemoryItemCatalog, RdfItemCatalog

__all__ = [
    "ItemType",
    "ClassItem",
    "ObjectPropertyItem",
    "DatatypePropertyItem",
    "DataSpecificationItem",
    "CatalogStats",
    "ItemCatalog",
    "InMemoryItemCatalog",
    "RdfItemCatalog",
]
