"""
Item catalog stores.

The catalog is a read-only lookup of data specification items by IRI. Two
stores are provided: a plain in-memory store and a view over an rdflib graph
holding the OWL declarations of a data specification.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union
from urllib.parse import unquote, urlparse

from rdflib import Graph, Literal, Namespace, URIRef, RDF, RDFS, OWL

from .domain import (
    ClassItem, ObjectPropertyItem, DatatypePropertyItem,
    DataSpecificationItem, CatalogStats
)

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"

SKOS = Namespace("http://www.w3.org/2004/02/skos/core#")


class ItemCatalog:
    """Read-only lookup of data specification items."""

    def lookup(self, iri: str) -> Optional[DataSpecificationItem]:
        """Find the item with the given IRI.

        Returns:
            The item, or None when the IRI is not part of the data specification
        """
        raise NotImplementedError

    def get_stats(self) -> CatalogStats:
        raise NotImplementedError

    def lookup_many(self, iris: Iterable[str]) -> List[DataSpecificationItem]:
        """Resolve several IRIs, skipping the unknown ones. Keeps input order."""
        items = []
        for iri in iris:
            item = self.lookup(iri)
            if item is not None:
                items.append(item)
        return items

    def __contains__(self, iri: str) -> bool:
        return self.lookup(iri) is not None


class InMemoryItemCatalog(ItemCatalog):
    """Catalog backed by a dictionary of already built items."""

    def __init__(self, items: Iterable[DataSpecificationItem] = ()):
        self._items: Dict[str, DataSpecificationItem] = {}
        for item in items:
            if item.iri in self._items:
                logger.warning(f"Duplicate catalog item {item.iri} ignored")
                continue
            self._items[item.iri] = item

    def lookup(self, iri: str) -> Optional[DataSpecificationItem]:
        return self._items.get(iri)

    def get_stats(self) -> CatalogStats:
        items = list(self._items.values())
        return CatalogStats(
            total_classes=sum(1 for i in items if isinstance(i, ClassItem)),
            total_object_properties=sum(1 for i in items if isinstance(i, ObjectPropertyItem)),
            total_datatype_properties=sum(1 for i in items if isinstance(i, DatatypePropertyItem))
        )

    def __len__(self) -> int:
        return len(self._items)


class RdfItemCatalog(ItemCatalog):
    """Catalog view over an rdflib graph with OWL class and property declarations."""

    def __init__(self, graph: Graph, language: str = DEFAULT_LANGUAGE):
        """Initialize the catalog.

        Args:
            graph: Graph with owl:Class, owl:ObjectProperty and owl:DatatypeProperty declarations
            language: Preferred language of labels
        """
        self.graph = graph
        self.language = language

    @classmethod
    def from_file(cls, path: Union[str, Path], format: Optional[str] = None,
                  language: str = DEFAULT_LANGUAGE) -> "RdfItemCatalog":
        """Parse a data specification file (OWL/Turtle/RDF-XML/...) into a catalog."""
        graph = Graph()
        graph.parse(str(path), format=format)
        logger.info(f"Loaded {len(graph)} triples from {path}")
        return cls(graph, language)

    def lookup(self, iri: str) -> Optional[DataSpecificationItem]:
        subject = URIRef(iri)

        if (subject, RDF.type, OWL.Class) in self.graph:
            return ClassItem(iri=iri, label=self._label(subject))

        if (subject, RDF.type, OWL.ObjectProperty) in self.graph:
            domain = self.graph.value(subject, RDFS.domain)
            range_obj = self.graph.value(subject, RDFS.range)
            if domain is None or range_obj is None:
                logger.warning(f"Object property {iri} has no domain or range, skipping it")
                return None
            return ObjectPropertyItem(
                iri=iri,
                label=self._label(subject),
                domain_iri=str(domain),
                domain_label=self._label(domain),
                range_iri=str(range_obj),
                range_label=self._label(range_obj)
            )

        if (subject, RDF.type, OWL.DatatypeProperty) in self.graph:
            domain = self.graph.value(subject, RDFS.domain)
            if domain is None:
                logger.warning(f"Datatype property {iri} has no domain, skipping it")
                return None
            range_obj = self.graph.value(subject, RDFS.range) or RDFS.Literal
            return DatatypePropertyItem(
                iri=iri,
                label=self._label(subject),
                domain_iri=str(domain),
                domain_label=self._label(domain),
                range_datatype_iri=str(range_obj)
            )

        return None

    def get_stats(self) -> CatalogStats:
        return CatalogStats(
            total_classes=len(set(self.graph.subjects(RDF.type, OWL.Class))),
            total_object_properties=len(set(self.graph.subjects(RDF.type, OWL.ObjectProperty))),
            total_datatype_properties=len(set(self.graph.subjects(RDF.type, OWL.DatatypeProperty)))
        )

    def _label(self, subject: URIRef) -> str:
        """Pick the best label of a resource.

        Preference: rdfs:label in the preferred language, skos:prefLabel in the
        preferred language, any rdfs:label, and finally the IRI local name.
        """
        fallback = None
        for predicate in (RDFS.label, SKOS.prefLabel):
            for obj in self.graph.objects(subject, predicate):
                if not isinstance(obj, Literal):
                    continue
                if obj.language == self.language:
                    return str(obj)
                if fallback is None and predicate == RDFS.label:
                    fallback = str(obj)
        if fallback is not None:
            return fallback
        return local_name(str(subject))


def local_name(iri: str) -> str:
    """Readable name of an IRI: the fragment, else the last path segment."""
    parsed = urlparse(iri)
    if parsed.fragment:
        return unquote(parsed.fragment)
    segments = [segment for segment in parsed.path.split("/") if segment]
    if segments:
        return unquote(segments[-1])
    return iri
