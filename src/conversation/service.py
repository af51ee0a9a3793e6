"""
High-level conversation service providing the public interface for conversation turns.

This is the only public interface into the conversation module. It wires the
item catalog, the substructure merger, the selection lifecycle and the SPARQL
translation together for one conversation at a time; callers process the
turns of a conversation sequentially.
"""

import logging
from typing import Iterable, List, Optional

from catalog.domain import ObjectPropertyItem, DatatypePropertyItem
from catalog.store import ItemCatalog
from sparql.translator import SparqlTranslationService
from substructure.domain import DataSpecificationSubstructure, ItemMapping, UserSelection
from substructure.merger import SubstructureMerger

from .domain import Conversation

logger = logging.getLogger(__name__)


class ConversationService:
    """Builds a conversation's substructure turn by turn and translates it to SPARQL."""

    def __init__(self, catalog: ItemCatalog,
                 merger: Optional[SubstructureMerger] = None,
                 translator: Optional[SparqlTranslationService] = None):
        """Initialize the conversation service.

        Args:
            catalog: Item catalog of the conversation's data specification
            merger: Optional merger. If None, creates one over the catalog.
            translator: Optional SPARQL translator. If None, creates a new one.
        """
        self.catalog = catalog
        self.merger = merger if merger is not None else SubstructureMerger(catalog)
        self.translator = translator if translator is not None else SparqlTranslationService()

    def start_conversation(self, conversation_id: str) -> Conversation:
        """Create a conversation with an empty substructure and no selections."""
        return Conversation(conversation_id=conversation_id)

    def process_user_message(self, conversation: Conversation, message_id: str,
                             text: str, mappings: Iterable[ItemMapping]) -> List[ItemMapping]:
        """Apply one user message to the conversation.

        When the message is the suggested message generated from the user's
        selections, the selected properties are mapped too (implicitly, unless
        the caller mapped them already) and their query flags are kept for
        translation. The selections are cleared afterwards in every case.

        Args:
            conversation: Conversation the message belongs to
            message_id: ID of the user message
            text: Text of the user message
            mappings: Mappings of the message resolved upstream

        Returns:
            All mappings of the message, including the implicit ones
        """
        turn_mappings = list(mappings)

        if conversation.selection.is_suggested_message(text):
            mapped_iris = {m.item_iri for m in turn_mappings}
            for selection in conversation.selection.user_selections:
                iri = selection.selected_property_iri
                conversation.applied_selections[iri] = selection
                if iri not in mapped_iris:
                    turn_mappings.append(ItemMapping(item_iri=iri))
            logger.info(f"Suggested message sent, applied "
                        f"{len(conversation.selection.user_selections)} selections")

        turn_mappings = [
            mapping.locate_in(text).model_copy(update={"user_message_id": message_id})
            for mapping in turn_mappings
        ]
        result = self.merger.merge(conversation.substructure, turn_mappings)

        conversation.item_mappings[message_id] = result.mappings
        conversation.selection.clear()
        return result.mappings

    def update_selections(self, conversation: Conversation,
                          selections: List[UserSelection]) -> List[UserSelection]:
        """Replace the user's selected properties.

        Raises:
            ValueError: If a selected IRI is not a property of the data specification
        """
        selected_iris = {s.selected_property_iri for s in selections}
        not_found = [
            iri for iri in sorted(selected_iris)
            if not isinstance(self.catalog.lookup(iri), (ObjectPropertyItem, DatatypePropertyItem))
        ]
        if not_found:
            logger.error(f"The following property IRIs were not found: {not_found}")
            raise ValueError(f"Selected items are not properties of the data specification: {not_found}")

        return conversation.selection.replace(selected_iris, selections)

    def record_suggested_message(self, conversation: Conversation, message: str):
        """Store the suggested message generated from the current selections."""
        conversation.selection.record_suggestion(message)

    def get_mappings(self, conversation: Conversation, message_id: str) -> List[ItemMapping]:
        return conversation.item_mappings.get(message_id, [])

    def get_substructure(self, conversation: Conversation) -> DataSpecificationSubstructure:
        return conversation.substructure

    def translate(self, conversation: Conversation) -> Optional[str]:
        """Translate the conversation's substructure to SPARQL.

        Returns:
            The query, or None while nothing has been mapped yet
        """
        if conversation.substructure.is_empty():
            logger.info(f"Conversation {conversation.conversation_id} has no mapped items, no query generated")
            return None
        return self.translator.translate_substructure(
            conversation.substructure,
            conversation.applied_selections.values()
        )
