"""
Substructure merger.

Applies the item mappings of one conversational turn to the substructure.
Adding a property also adds its domain class (and, for object properties, its
range class) when they are missing; every class added that way is reported as
an implicit mapping with empty mapped words so it can be persisted with the
turn.
"""

import logging
from typing import Dict, List, NamedTuple

from catalog.domain import ClassItem, ObjectPropertyItem, DatatypePropertyItem
from catalog.store import ItemCatalog

from .domain import (
    DataSpecificationSubstructure, SubstructureObjectProperty,
    SubstructureDatatypeProperty, ItemMapping
)

logger = logging.getLogger(__name__)


class MergeResult(NamedTuple):
    substructure: DataSpecificationSubstructure
    mappings: List[ItemMapping]  # supplied mappings that resolved, plus implicit ones


class SubstructureMerger:
    """Merges resolved item mappings into a substructure."""

    def __init__(self, catalog: ItemCatalog):
        self.catalog = catalog

    def merge(self, substructure: DataSpecificationSubstructure,
              mappings: List[ItemMapping]) -> MergeResult:
        """Merge one turn's mappings into the substructure (in place).

        Args:
            substructure: Substructure of the conversation
            mappings: Mappings of a single user message

        Returns:
            MergeResult with the updated substructure and every mapping of the
            turn, including the implicit ones for classes added along the way.
            Each item IRI appears at most once.
        """
        merged: Dict[str, ItemMapping] = {}

        for mapping in mappings:
            item = self.catalog.lookup(mapping.item_iri)
            if item is None:
                logger.warning(f"Could not find item {mapping.item_iri} "
                               f"(mapped words: \"{mapping.mapped_words}\"), dropping the mapping")
                continue

            existing = merged.get(item.iri)
            if existing is not None and not existing.is_implicit:
                logger.debug(f"Item {item.iri} already mapped in this turn, skipping duplicate")
                continue
            merged[item.iri] = mapping

            if isinstance(item, ClassItem):
                self._ensure_class(substructure, item.iri, item.label)
            elif isinstance(item, ObjectPropertyItem):
                self._merge_object_property(substructure, item, mapping, merged)
            elif isinstance(item, DatatypePropertyItem):
                self._merge_datatype_property(substructure, item, mapping, merged)

        logger.info(f"Merged {len(merged)} mappings, substructure has "
                    f"{len(substructure.class_items)} classes")
        return MergeResult(substructure, list(merged.values()))

    def _merge_object_property(self, substructure: DataSpecificationSubstructure,
                               item: ObjectPropertyItem, mapping: ItemMapping,
                               merged: Dict[str, ItemMapping]):
        for class_iri, class_label in ((item.domain_iri, item.domain_label),
                                       (item.range_iri, item.range_label)):
            if self._ensure_class(substructure, class_iri, class_label):
                self._add_implicit_mapping(class_iri, mapping, merged)

        domain_class = substructure.get_class(item.domain_iri)
        if domain_class.get_object_property(item.iri) is None:
            domain_class.object_properties.append(SubstructureObjectProperty(
                iri=item.iri,
                label=item.label,
                domain=item.domain_iri,
                domain_label=item.domain_label,
                range=item.range_iri,
                range_label=item.range_label
            ))
            logger.debug(f"Added object property {item.iri} to {item.domain_iri}")

    def _merge_datatype_property(self, substructure: DataSpecificationSubstructure,
                                 item: DatatypePropertyItem, mapping: ItemMapping,
                                 merged: Dict[str, ItemMapping]):
        if self._ensure_class(substructure, item.domain_iri, item.domain_label):
            self._add_implicit_mapping(item.domain_iri, mapping, merged)

        domain_class = substructure.get_class(item.domain_iri)
        if domain_class.get_datatype_property(item.iri) is None:
            domain_class.datatype_properties.append(SubstructureDatatypeProperty(
                iri=item.iri,
                label=item.label,
                domain=item.domain_iri,
                domain_label=item.domain_label,
                range=item.range_datatype_iri
            ))
            logger.debug(f"Added datatype property {item.iri} to {item.domain_iri}")

    @staticmethod
    def _ensure_class(substructure: DataSpecificationSubstructure, iri: str, label: str) -> bool:
        """Add the class node if missing. Returns True when it was created."""
        if substructure.contains_class(iri):
            return False
        substructure.add_class(iri, label)
        logger.debug(f"Added class {iri} to the substructure")
        return True

    @staticmethod
    def _add_implicit_mapping(class_iri: str, source: ItemMapping, merged: Dict[str, ItemMapping]):
        if class_iri in merged:
            return
        merged[class_iri] = ItemMapping(item_iri=class_iri, user_message_id=source.user_message_id)
