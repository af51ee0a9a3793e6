"""
Substructure Module

This module builds, turn by turn, the subset of a data specification that a
conversation refers to, and keeps it consistent: every property is owned by
its domain class and every object property's range class is present.

Public Interface:
- SubstructureMerger: merges item mappings into the substructure
- SelectionLifecycle: single-use user selections and the suggested message
- Domain models: DataSpecificationSubstructure, ItemMapping, UserSelection, etc.
"""

from .domain import (
    DataSpecificationSubstructure, SubstructureClass, SubstructureObjectProperty,
    SubstructureDatatypeProperty, ItemMapping, UserSelection, SubstructureIntegrityError
)
from .merger import SubstructureMerger, MergeResult
from .selection import SelectionLifecycle, SelectionState

__all__ = [
    "DataSpecificationSubstructure",
    "SubstructureClass",
    "SubstructureObjectProperty",
    "SubstructureDatatypeProperty",
    "ItemMapping",
    "UserSelection",
    "SubstructureIntegrityError",
    "SubstructureMerger",
    "MergeResult",
    "SelectionLifecycle",
    "SelectionState",
]
