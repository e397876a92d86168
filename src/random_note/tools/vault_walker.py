"""
Vault walker for Advanced Random Note.

This module flattens folder trees into the leaf files the search engine works
on, and builds those trees from a vault directory on disk. Markdown files get
their front matter and tags extracted so queries can filter on them.
"""

import os
import re
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import yaml

from ..models.vault import VaultFile, VaultFolder, VaultNode, normalize_vault_path


logger = logging.getLogger(__name__)

FRONTMATTER_PATTERN = re.compile(r'\A---\s*\n(.*?)\n(?:---|\.\.\.)\s*(?:\n|\Z)', re.DOTALL)
INLINE_TAG_PATTERN = re.compile(r'(?:^|\s)#([^\s#!"$%&\'()*+,.:;<=>?@\[\]^`{|}~]+)')
CODE_BLOCK_PATTERN = re.compile(r'```.*?```|`[^`\n]*`', re.DOTALL)


def flatten_file(node: VaultNode) -> List[VaultFile]:
    """
    Flatten a folder tree into its leaf files.

    Args:
        node: A folder (searched recursively) or a single file

    Returns:
        Every file below ``node`` in depth-first order; a file flattens to
        itself
    """
    return list(iter_files(node))


def iter_files(node: VaultNode) -> Iterator[VaultFile]:
    """Yield the files below ``node`` without building intermediate lists."""
    if isinstance(node, VaultFile):
        yield node
        return

    # Explicit stack so deep vaults can't hit the recursion limit
    stack = [iter(node.children)]
    while stack:
        child = next(stack[-1], None)
        if child is None:
            stack.pop()
        elif isinstance(child, VaultFile):
            yield child
        else:
            stack.append(iter(child.children))


def parse_markdown_metadata(content: str) -> Tuple[Dict[str, Any], Tuple[str, ...]]:
    """
    Extract front matter and tags from markdown text.

    Tags come from the ``tags``/``tag`` front matter property and from inline
    ``#tags`` outside code spans.

    Returns:
        Tuple of (frontmatter, tags)
    """
    frontmatter: Dict[str, Any] = {}
    body = content

    match = FRONTMATTER_PATTERN.match(content)
    if match:
        body = content[match.end():]
        try:
            data = yaml.safe_load(match.group(1))
            if isinstance(data, dict):
                frontmatter = {str(key): value for key, value in data.items()}
            elif data is not None:
                logger.debug(f"Ignoring front matter that is not a mapping: {type(data).__name__}")
        except yaml.YAMLError as e:
            logger.warning(f"Invalid front matter: {e}")

    tags: List[str] = []
    for key in ('tags', 'tag'):
        value = frontmatter.get(key)
        if isinstance(value, str):
            value = re.split(r'[,\s]+', value)
        if isinstance(value, list):
            tags.extend(str(tag).lstrip('#') for tag in value if tag)

    body = CODE_BLOCK_PATTERN.sub(' ', body)
    for tag in INLINE_TAG_PATTERN.findall(body):
        # Pure numbers like '#123' are not tags
        if not tag.isdigit():
            tags.append(tag)

    return frontmatter, tuple(tag for tag in dict.fromkeys(tags) if tag)


class Vault:
    """
    A vault backed by a directory on disk.

    The tree is read lazily on first access and cached until :meth:`refresh`
    is called. Hidden files and folders (such as '.obsidian' and '.trash')
    are never part of the vault.
    """

    def __init__(self, root_path: Union[str, Path], read_metadata: bool = True):
        """
        Initialize the vault.

        Args:
            root_path: Directory containing the vault
            read_metadata: Whether to parse front matter and tags of markdown files
        """
        self.root_path = Path(root_path).expanduser().resolve()
        self.read_metadata = read_metadata
        self._root: Optional[VaultFolder] = None
        self._stats = {
            'files_read': 0,
            'folders_read': 0,
            'errors': 0
        }

    @property
    def root(self) -> VaultFolder:
        """The root folder of the vault tree."""
        if self._root is None:
            self.refresh()
        return self._root

    def refresh(self) -> VaultFolder:
        """
        Re-read the vault directory.

        Raises:
            FileNotFoundError: If the vault directory does not exist
            NotADirectoryError: If the vault path is not a directory
        """
        if not self.root_path.exists():
            raise FileNotFoundError(f"Vault path not found: {self.root_path}")
        if not self.root_path.is_dir():
            raise NotADirectoryError(f"Vault path is not a directory: {self.root_path}")

        self.reset_stats()
        logger.info(f"Reading vault: {self.root_path}")
        self._root = self._read_folder(self.root_path, '')
        logger.debug(f"Vault read: {self._stats}")
        return self._root

    def _read_folder(self, folder_path: Path, relative_path: str) -> VaultFolder:
        """Read one folder and everything below it."""
        self._stats['folders_read'] += 1
        children: List[VaultNode] = []

        try:
            entries = sorted(os.scandir(folder_path), key=lambda entry: entry.name)
        except OSError as e:
            logger.warning(f"Cannot read folder {folder_path}: {e}")
            self._stats['errors'] += 1
            return VaultFolder(path=relative_path)

        for entry in entries:
            if entry.name.startswith('.'):
                continue

            child_path = f"{relative_path}/{entry.name}" if relative_path else entry.name
            try:
                if entry.is_dir(follow_symlinks=False):
                    children.append(self._read_folder(Path(entry.path), child_path))
                elif entry.is_file():
                    children.append(self._read_file(Path(entry.path), child_path))
            except OSError as e:
                logger.warning(f"Error reading {entry.path}: {e}")
                self._stats['errors'] += 1

        return VaultFolder(path=relative_path, children=children)

    def _read_file(self, file_path: Path, relative_path: str) -> VaultFile:
        """Create a file entry, with metadata for markdown files."""
        self._stats['files_read'] += 1
        file = VaultFile.from_path(relative_path)
        if not (self.read_metadata and file.is_markdown()):
            return file

        try:
            content = file_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read metadata from {file_path}: {e}")
            self._stats['errors'] += 1
            return file

        frontmatter, tags = parse_markdown_metadata(content)
        return file.model_copy(update={'frontmatter': frontmatter, 'tags': tags})

    def get_files(self) -> List[VaultFile]:
        """Return every file in the vault."""
        return flatten_file(self.root)

    def get_markdown_files(self) -> List[VaultFile]:
        """Return every markdown file in the vault."""
        return [file for file in iter_files(self.root) if file.is_markdown()]

    def get_abstract_file(self, path: str) -> Optional[VaultNode]:
        """
        Look up a file or folder by its vault-relative path.

        Returns:
            The node, or None if nothing exists at ``path``
        """
        node: Optional[VaultNode] = self.root
        for segment in (s for s in normalize_vault_path(path).split('/') if s):
            if not isinstance(node, VaultFolder):
                return None
            node = node.get_child(segment)
            if node is None:
                return None
        return node

    def get_stats(self) -> Dict[str, int]:
        """Get statistics about the last vault read."""
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = {
            'files_read': 0,
            'folders_read': 0,
            'errors': 0
        }
