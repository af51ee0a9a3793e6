"""
Conversation state held by the conversation service.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from substructure.domain import DataSpecificationSubstructure, ItemMapping, UserSelection
from substructure.selection import SelectionLifecycle


@dataclass
class Conversation:
    """Everything the core keeps about one conversation."""

    conversation_id: str
    substructure: DataSpecificationSubstructure = field(default_factory=DataSpecificationSubstructure)
    selection: SelectionLifecycle = field(default_factory=SelectionLifecycle)
    item_mappings: Dict[str, List[ItemMapping]] = field(default_factory=dict)      # message id -> mappings
    applied_selections: Dict[str, UserSelection] = field(default_factory=dict)     # property IRI -> selection
