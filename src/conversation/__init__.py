"""
Conversation module providing turn-by-turn substructure building.

This module provides a unified interface for conversation turns through
ConversationService: merging the mappings of each user message, managing the
user's property selections and translating the substructure to SPARQL.
"""

# Main public interface
from .service import ConversationService
from .domain import Conversation

# Export only the public interface
__all__ = ['ConversationService', 'Conversation']
