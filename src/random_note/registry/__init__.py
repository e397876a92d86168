"""
Saved query management for Advanced Random Note.
"""

from .query_registry import (
    ActionType,
    InvalidQueryReference,
    QueryRegistry,
    RegistryAction
)

__all__ = ['ActionType', 'InvalidQueryReference', 'QueryRegistry', 'RegistryAction']
