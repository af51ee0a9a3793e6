"""
SPARQL translation of a data specification substructure.

The substructure is walked depth-first in stored class order. Each class gets
a comment and a type triple the first time it is reached; edges back to an
already visited class are still emitted (they close cycles in the pattern)
but do not visit the class again. A range class is visited as soon as the
edge leading to it is emitted, before the rest of the current class's
properties.

A range class reached through an OPTIONAL edge is nested inside that
OPTIONAL block only when no mandatory edge leads to it; otherwise it is
visited outside, so its own mandatory properties and filters stay mandatory.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from substructure.domain import (
    DataSpecificationSubstructure, SubstructureClass, SubstructureIntegrityError,
    UserSelection, FILTER_VARIABLE_PLACEHOLDER
)

logger = logging.getLogger(__name__)

INDENT = "  "


def to_variable(label: str) -> str:
    """Pattern variable name for a label: spaces become underscores."""
    return label.replace(" ", "_")


class SparqlTranslationService:
    """Compiles substructures into SPARQL SELECT queries."""

    def __init__(self, indent: str = INDENT):
        self.indent = indent

    def translate_substructure(self, substructure: DataSpecificationSubstructure,
                               selections: Optional[Iterable[UserSelection]] = None) -> str:
        """Render the substructure as a basic graph pattern query.

        Args:
            substructure: Substructure snapshot; not modified
            selections: Optional query shaping flags per property IRI

        Returns:
            The complete query text

        Raises:
            SubstructureIntegrityError: If an object property's range class is missing
        """
        classes = {class_item.iri: class_item for class_item in substructure.class_items}
        selection_map = {s.selected_property_iri: s for s in (selections or [])}
        mandatory_ranges = {
            prop.range
            for class_item in substructure.class_items
            for prop in class_item.object_properties
            if not self._is_optional(selection_map.get(prop.iri))
        }
        visited: Set[str] = set()
        lines: List[str] = []

        for class_item in substructure.class_items:
            if class_item.iri in visited:
                continue
            # Explicit stack of class walkers; a walker yields the range class to visit next
            stack = [self._walk(class_item, "", classes, selection_map, mandatory_ranges, visited, lines)]
            while stack:
                try:
                    range_class, prefix = next(stack[-1])
                except StopIteration:
                    stack.pop()
                    continue
                stack.append(self._walk(range_class, prefix, classes, selection_map,
                                        mandatory_ranges, visited, lines))

        logger.debug(f"Translated {len(visited)} classes into {len(lines)} pattern lines")

        query = ["SELECT DISTINCT *", "WHERE {"]
        query += [self.indent + line for line in lines]
        query.append("}")
        return "\n".join(query) + "\n"

    def _walk(self, class_item: SubstructureClass, prefix: str,
              classes: Dict[str, SubstructureClass], selections: Dict[str, UserSelection],
              mandatory_ranges: Set[str], visited: Set[str],
              lines: List[str]) -> Iterator[Tuple[SubstructureClass, str]]:
        """Emit the lines of one class, yielding each range class reached for the first time."""
        visited.add(class_item.iri)
        subject = "?" + to_variable(class_item.label)
        lines.append(f"{prefix}# {class_item.label}")
        lines.append(f"{prefix}{subject} a <{class_item.iri}> .")

        for prop in class_item.object_properties:
            range_class = classes.get(prop.range)
            if range_class is None:
                logger.error(f"Range {prop.range} of {prop.iri} is not a class of the substructure")
                raise SubstructureIntegrityError(
                    f"Object property {prop.iri} points to missing class {prop.range}")

            variable = "?" + to_variable(prop.range_label)
            selection = selections.get(prop.iri)
            optional = self._is_optional(selection)
            inner = self._open(prefix, optional, lines)
            lines.append(f"{inner}{subject} <{prop.iri}> {variable} .")
            if selection is not None and selection.filter_expression:
                lines.append(inner + self._filter(selection, variable))
            if prop.range not in visited and not (optional and prop.range in mandatory_ranges):
                yield range_class, inner
            self._close(prefix, optional, lines)

        for prop in class_item.datatype_properties:
            variable = "?" + to_variable(prop.label)
            selection = selections.get(prop.iri)
            optional = self._is_optional(selection)
            inner = self._open(prefix, optional, lines)
            lines.append(f"{inner}{subject} <{prop.iri}> {variable} .")
            if selection is not None and selection.filter_expression:
                lines.append(inner + self._filter(selection, variable))
            self._close(prefix, optional, lines)

    def _open(self, prefix: str, optional: bool, lines: List[str]) -> str:
        if not optional:
            return prefix
        lines.append(prefix + "OPTIONAL {")
        return prefix + self.indent

    @staticmethod
    def _close(prefix: str, optional: bool, lines: List[str]):
        if optional:
            lines.append(prefix + "}")

    @staticmethod
    def _is_optional(selection: Optional[UserSelection]) -> bool:
        return selection is not None and selection.is_optional

    @staticmethod
    def _filter(selection: UserSelection, variable: str) -> str:
        expression = selection.filter_expression.replace(FILTER_VARIABLE_PLACEHOLDER, variable)
        return f"FILTER({expression})"
