"""
ConflictGuard: conflict detection for legal documents.

Extracts structured entities from contracts, terms and conditions, directives
and regulations with an LLM, stores them as a Document -> Entity -> Conflict
property graph, and asks the LLM to reason about contradictions between them.
"""

__version__ = "0.1.0"
__author__ = "ConflictGuard Team"

from conflictguard.config import get_settings

__all__ = ["get_settings", "__version__"]
