"""
Substructure domain models.

The substructure is the part of a data specification a conversation has
touched so far: an ordered list of classes, each owning the object and
datatype properties whose domain it is. Properties carry copies of their
domain and range labels so the substructure can be rendered without going
back to the catalog.

Serialized field names follow the persisted JSON document (ClassItems, Iri,
Label, ...).
"""

import re
from typing import List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_pascal

FILTER_VARIABLE_PLACEHOLDER = "{?var}"


class SubstructureIntegrityError(RuntimeError):
    """Raised when an object property points to a class missing from the substructure."""


class _SubstructureModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)


class SubstructureObjectProperty(_SubstructureModel):
    """Object property edge owned by its domain class."""

    iri: str = Field(..., description="Property IRI")
    label: str = Field(..., description="Property label")
    domain: str = Field(..., description="Domain class IRI (the owner)")
    domain_label: str = Field(..., description="Domain class label")
    range: str = Field(..., description="Range class IRI, always present as a class of the substructure")
    range_label: str = Field(..., description="Range class label")


class SubstructureDatatypeProperty(_SubstructureModel):
    """Datatype property edge owned by its domain class."""

    iri: str = Field(..., description="Property IRI")
    label: str = Field(..., description="Property label")
    domain: str = Field(..., description="Domain class IRI (the owner)")
    domain_label: str = Field(..., description="Domain class label")
    range: str = Field(..., description="Literal datatype IRI")


class SubstructureClass(_SubstructureModel):
    """Class node with its outgoing properties."""

    iri: str = Field(..., description="Class IRI")
    label: str = Field(..., description="Class label")
    object_properties: List[SubstructureObjectProperty] = Field(default_factory=list)
    datatype_properties: List[SubstructureDatatypeProperty] = Field(default_factory=list)

    def get_object_property(self, iri: str) -> Optional[SubstructureObjectProperty]:
        for prop in self.object_properties:
            if prop.iri == iri:
                return prop
        return None

    def get_datatype_property(self, iri: str) -> Optional[SubstructureDatatypeProperty]:
        for prop in self.datatype_properties:
            if prop.iri == iri:
                return prop
        return None


class DataSpecificationSubstructure(_SubstructureModel):
    """The substructure of one conversation. Only grows over time."""

    class_items: List[SubstructureClass] = Field(default_factory=list)

    def get_class(self, iri: str) -> Optional[SubstructureClass]:
        for class_item in self.class_items:
            if class_item.iri == iri:
                return class_item
        return None

    def contains_class(self, iri: str) -> bool:
        return self.get_class(iri) is not None

    def add_class(self, iri: str, label: str) -> SubstructureClass:
        """Append a new class node. The caller checks it is not present yet."""
        class_item = SubstructureClass(iri=iri, label=label)
        self.class_items.append(class_item)
        return class_item

    def class_iris(self) -> Set[str]:
        return {class_item.iri for class_item in self.class_items}

    def item_iris(self) -> Set[str]:
        """IRIs of all classes and properties in the substructure."""
        iris = set()
        for class_item in self.class_items:
            iris.add(class_item.iri)
            iris.update(prop.iri for prop in class_item.object_properties)
            iris.update(prop.iri for prop in class_item.datatype_properties)
        return iris

    def is_empty(self) -> bool:
        return not self.class_items

    def flatten(self) -> List[Tuple[str, str]]:
        """List every class and property once as (iri, label).

        Each class comes first, followed by its object properties and then its
        datatype properties, in stored order.
        """
        listed = set()
        flat = []
        for class_item in self.class_items:
            entries = [(class_item.iri, class_item.label)]
            entries += [(p.iri, p.label) for p in class_item.object_properties]
            entries += [(p.iri, p.label) for p in class_item.datatype_properties]
            for iri, label in entries:
                if iri not in listed:
                    listed.add(iri)
                    flat.append((iri, label))
        return flat

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, data: str) -> "DataSpecificationSubstructure":
        return cls.model_validate_json(data)


class ItemMapping(BaseModel):
    """Occurrence of a data specification item in one user message."""

    model_config = ConfigDict(frozen=True)

    item_iri: str = Field(..., description="IRI of the mapped item")
    mapped_words: str = Field(default="", description="Phrase of the message the item was derived from; empty when added implicitly")
    user_message_id: Optional[str] = Field(default=None, description="Message the mapping belongs to")
    start_index: Optional[int] = Field(default=None, description="Offset of the mapped words in the message")
    end_index: Optional[int] = Field(default=None, description="Offset just past the mapped words")

    @property
    def is_implicit(self) -> bool:
        return self.mapped_words == ""

    def locate_in(self, text: str) -> "ItemMapping":
        """Return a copy with offsets of the first case-insensitive occurrence of the mapped words."""
        if self.is_implicit or self.start_index is not None:
            return self
        # Search the text itself: lowercasing may change its length
        match = re.search(re.escape(self.mapped_words), text, re.IGNORECASE)
        if match is None:
            return self
        return self.model_copy(update={
            "start_index": match.start(),
            "end_index": match.end()
        })


class UserSelection(BaseModel):
    """Property picked by the user, with query shaping flags."""

    model_config = ConfigDict(frozen=True)

    selected_property_iri: str = Field(..., description="IRI of the selected property")
    is_optional: bool = Field(default=False, description="Property match must not eliminate results")
    filter_expression: Optional[str] = Field(default=None, description="Filter template with a {?var} placeholder")

    @field_validator("filter_expression")
    @classmethod
    def _check_placeholder(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        if FILTER_VARIABLE_PLACEHOLDER not in value:
            raise ValueError(f"Filter expression must contain the {FILTER_VARIABLE_PLACEHOLDER} placeholder")
        return value
