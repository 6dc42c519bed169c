"""
HTTP API for ConflictGuard.
"""
