"""
SPARQL Translation Module

Public Interface:
- SparqlTranslationService: compiles a substructure into a SPARQL query
"""

from .translator import SparqlTranslationService, to_variable

__all__ = ["SparqlTranslationService", "to_variable"]
