"""
User selection lifecycle.

Selections are single-use: the user picks properties, a suggested message is
generated from them, and the next turn consumes them. The lifecycle moves
EMPTY -> PENDING -> SUGGESTED and is cleared back to EMPTY after every turn.
"""

import logging
from enum import Enum
from typing import Iterable, List, Optional, Set

from .domain import UserSelection

logger = logging.getLogger(__name__)


class SelectionState(str, Enum):
    EMPTY = "empty"          # nothing selected
    PENDING = "pending"      # selections stored, no suggested message yet
    SUGGESTED = "suggested"  # suggested message generated from the selections


class SelectionLifecycle:
    """Selections and the suggested message of one conversation."""

    def __init__(self):
        self.user_selections: List[UserSelection] = []
        self.suggested_message: Optional[str] = None
        self.state = SelectionState.EMPTY

    def replace(self, selected_iris: Set[str],
                new_selections: Iterable[UserSelection]) -> List[UserSelection]:
        """Replace all stored selections (not add to them).

        Args:
            selected_iris: IRIs of the properties the user has selected
            new_selections: Per-property flags; rows for IRIs outside
                selected_iris are ignored, duplicates keep the first row

        Returns:
            The stored selections
        """
        stored: List[UserSelection] = []
        seen = set()
        for selection in new_selections:
            iri = selection.selected_property_iri
            if iri not in selected_iris or iri in seen:
                continue
            seen.add(iri)
            stored.append(selection)

        missing = set(selected_iris) - seen
        if missing:
            logger.warning(f"No selection flags supplied for {sorted(missing)}")

        logger.debug(f"Replacing {len(self.user_selections)} selections with {len(stored)}")
        self.user_selections = stored
        self.suggested_message = None
        self.state = SelectionState.PENDING if stored else SelectionState.EMPTY
        return stored

    def record_suggestion(self, message: str):
        if self.state != SelectionState.PENDING:
            raise ValueError(f"Cannot record a suggested message in state {self.state.value}")
        if not message or not message.strip():
            raise ValueError("Suggested message must not be empty")
        self.suggested_message = message
        self.state = SelectionState.SUGGESTED

    def is_suggested_message(self, text: str) -> bool:
        """True when the text is the suggested message generated from the current selections."""
        return self.state == SelectionState.SUGGESTED and text == self.suggested_message

    def clear(self):
        self.user_selections = []
        self.suggested_message = None
        self.state = SelectionState.EMPTY
