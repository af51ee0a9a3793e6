"""
Domain models for the item catalog.

These models represent the items of a data specification (classes, object
properties and datatype properties) as they are looked up by the substructure
merger. They are read-only snapshots; the catalog never changes them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union


class ItemType(str, Enum):
    """Kinds of data specification items."""
    CLASS = "Class"
    OBJECT_PROPERTY = "ObjectProperty"
    DATATYPE_PROPERTY = "DatatypeProperty"


@dataclass(frozen=True)
class ClassItem:
    """A class of the data specification."""

    item_type: ClassVar[ItemType] = ItemType.CLASS

    iri: str
    label: str


@dataclass(frozen=True)
class ObjectPropertyItem:
    """A property linking two classes."""

    item_type: ClassVar[ItemType] = ItemType.OBJECT_PROPERTY

    iri: str
    label: str
    domain_iri: str        # owning class
    domain_label: str
    range_iri: str         # target class
    range_label: str


@dataclass(frozen=True)
class DatatypePropertyItem:
    """A property linking a class to a literal value."""

    item_type: ClassVar[ItemType] = ItemType.DATATYPE_PROPERTY

    iri: str
    label: str
    domain_iri: str
    domain_label: str
    range_datatype_iri: str  # e.g. xsd:string, no class node exists for it


DataSpecificationItem = Union[ClassItem, ObjectPropertyItem, DatatypePropertyItem]


@dataclass
class CatalogStats:
    """Statistics about the catalog content."""

    total_classes: int
    total_object_properties: int
    total_datatype_properties: int

    @property
    def total_properties(self) -> int:
        return self.total_object_properties + self.total_datatype_properties
