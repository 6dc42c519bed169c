"""
API route modules.
"""

from conflictguard.api.routes import conflicts, documents, entities

__all__ = ["conflicts", "documents", "entities"]
