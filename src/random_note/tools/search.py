"""
Query evaluation for Advanced Random Note.

The evaluator turns a file tree (or an already flattened file list), an
optional folder scope and an optional saved query into the candidate set a
random file is picked from. It never mutates its inputs, so one evaluator can
serve any number of concurrent searches.
"""

import logging
from typing import List, Optional, Sequence, Union

from ..models.query import Query
from ..models.settings import Settings
from ..models.vault import VaultFile, VaultFolder, VaultNode
from .exclusion import FolderExclusion, is_under, split_segments
from .query_parser import matches_all, parse_query
from .vault_walker import Vault, flatten_file


logger = logging.getLogger(__name__)

FileSource = Union[VaultNode, Sequence[VaultFile]]


class QueryEvaluator:
    """
    Computes candidate sets for random file selection.

    Filters are applied in a fixed order: folder scope, disabled folders,
    then the query terms. All of them are conjunctive, so the order does not
    change the result.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the evaluator.

        Args:
            settings: Settings snapshot providing the disabled folders
        """
        self.settings = settings
        self.exclusion = FolderExclusion.parse(settings.disabled_folders)

    def evaluate(self, files: FileSource, path_prefix: Optional[str] = None,
                 query: Optional[Query] = None) -> List[VaultFile]:
        """
        Compute the candidate set.

        Args:
            files: Flattened files, or a folder/file node to flatten first
            path_prefix: Only keep files under this folder (e.g. 'notes/')
            query: Saved query whose terms must all match

        Returns:
            Matching files in their original order; possibly empty
        """
        candidates = self._flatten(files)
        total = len(candidates)

        if path_prefix:
            prefix = split_segments(path_prefix)
            candidates = [file for file in candidates if is_under(file.path, prefix)]

        if self.exclusion and (query is None or query.use_disabled_folders):
            candidates = [file for file in candidates if not self.exclusion.is_excluded(file.path)]

        if query is not None:
            terms = parse_query(query.query)
            if terms:
                candidates = [file for file in candidates if matches_all(file, terms)]

        logger.debug(
            f"Evaluated {'query ' + repr(query.name) if query else 'search'}: "
            f"{len(candidates)} of {total} files match"
        )
        return candidates

    def _flatten(self, files: FileSource) -> List[VaultFile]:
        if isinstance(files, (VaultFile, VaultFolder)):
            return flatten_file(files)
        return list(files)

    def search(self, query: Query, vault: Vault) -> List[VaultFile]:
        """Evaluate a saved query against every file in the vault."""
        return self.evaluate(vault.get_files(), query=query)

    def search_files(self, files: FileSource, path_prefix: Optional[str] = None) -> List[VaultFile]:
        """Evaluate without a query; only disabled folders and the scope apply."""
        return self.evaluate(files, path_prefix=path_prefix)

    def search_markdown(self, vault: Vault) -> List[VaultFile]:
        """Evaluate without a query over the markdown files of the vault."""
        return self.evaluate(vault.get_markdown_files())


def evaluate(files: FileSource, settings: Settings, path_prefix: Optional[str] = None,
             query: Optional[Query] = None) -> List[VaultFile]:
    """
    Convenience function to evaluate a search with a one-off evaluator.

    Args:
        files: Flattened files, or a folder/file node to flatten first
        settings: Settings snapshot providing the disabled folders
        path_prefix: Optional folder scope
        query: Optional saved query

    Returns:
        Candidate set in original order
    """
    return QueryEvaluator(settings).evaluate(files, path_prefix=path_prefix, query=query)

