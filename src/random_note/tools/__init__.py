"""
Search tools for Advanced Random Note.

This module contains the vault walker, disabled folder handling, the query
evaluator and the random selector.
"""

from .exclusion import FolderExclusion
from .search import QueryEvaluator, evaluate
from .selector import get_random_element
from .vault_walker import Vault, flatten_file

__all__ = [
    'FolderExclusion',
    'QueryEvaluator',
    'evaluate',
    'get_random_element',
    'Vault',
    'flatten_file'
]
