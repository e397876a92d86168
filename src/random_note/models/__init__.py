"""
Data models for Advanced Random Note.

This module contains the core data structures shared by the search engine,
the query registry and the settings store.
"""

from .query import OpenType, Query
from .settings import DEFAULT_SETTINGS, Settings
from .vault import VaultFile, VaultFolder

__all__ = ['OpenType', 'Query', 'DEFAULT_SETTINGS', 'Settings', 'VaultFile', 'VaultFolder']
