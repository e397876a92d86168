"""
Vault file tree data models for Advanced Random Note.

This module defines the read-only handles the search engine works on: leaf
file entries and the folders that contain them. Paths are always relative to
the vault root and use forward slashes.
"""

from typing import Any, Dict, List, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


MARKDOWN_EXTENSIONS = ("md",)


def normalize_vault_path(path: str) -> str:
    """Normalize a vault-relative path to forward slashes without edge slashes."""
    path = path.replace("\\", "/").strip()
    while "//" in path:
        path = path.replace("//", "/")
    if path.startswith("./"):
        path = path[2:]
    return path.strip("/")


class VaultFile(BaseModel):
    """
    A single leaf document in the vault.

    Attributes:
        path: Vault-relative path (e.g. 'notes/b.md')
        extension: Lower-case extension without the leading dot
        tags: Tags found in the file, without the leading '#'
        frontmatter: Parsed front matter properties (markdown only)
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Vault-relative path")
    extension: str = Field("", description="Lower-case extension without dot")
    tags: Tuple[str, ...] = Field(default_factory=tuple, description="Tags without '#'")
    frontmatter: Dict[str, Any] = Field(default_factory=dict, description="Front matter properties")

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Normalize the path and reject the vault root."""
        normalized = normalize_vault_path(v)
        if not normalized:
            raise ValueError("File path cannot be empty")
        return normalized

    @field_validator('extension')
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Normalize extension to lower case without leading dot."""
        return v.lstrip('.').lower()

    @field_validator('tags', mode='before')
    @classmethod
    def validate_tags(cls, v) -> Tuple[str, ...]:
        """Strip leading '#' and drop duplicates while keeping order."""
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        seen = []
        for tag in v:
            tag = str(tag).strip().lstrip('#')
            if tag and tag not in seen:
                seen.append(tag)
        return tuple(seen)

    @classmethod
    def from_path(cls, path: str, **kwargs: Any) -> 'VaultFile':
        """Create a file entry, deriving the extension from the path."""
        name = normalize_vault_path(path).rsplit('/', 1)[-1]
        extension = name.rsplit('.', 1)[1] if '.' in name.lstrip('.') else ''
        return cls(path=path, extension=extension, **kwargs)

    @property
    def name(self) -> str:
        """File name including the extension."""
        return self.path.rsplit('/', 1)[-1]

    @property
    def basename(self) -> str:
        """File name without the extension."""
        if self.extension and self.name.lower().endswith('.' + self.extension):
            return self.name[:-(len(self.extension) + 1)]
        return self.name

    @property
    def parent_path(self) -> str:
        """Path of the containing folder ('' for the vault root)."""
        return self.path.rsplit('/', 1)[0] if '/' in self.path else ''

    def is_markdown(self) -> bool:
        return self.extension in MARKDOWN_EXTENSIONS

    def __hash__(self) -> int:
        # frontmatter is a dict; equal entries always share a path
        return hash((type(self), self.path))

    def __str__(self) -> str:
        return self.path


class VaultFolder(BaseModel):
    """
    A folder node in the vault tree.

    The root folder has an empty path. Children keep the order they were
    added in, which is the order the flattener reports files in.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field("", description="Vault-relative path ('' for the root)")
    children: List[Union[VaultFile, 'VaultFolder']] = Field(default_factory=list)

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        return normalize_vault_path(v)

    @property
    def name(self) -> str:
        return self.path.rsplit('/', 1)[-1] if self.path else ''

    def is_root(self) -> bool:
        return self.path == ''

    def get_child(self, name: str) -> Optional[Union[VaultFile, 'VaultFolder']]:
        """Return the direct child with the given name, if any."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def __str__(self) -> str:
        return self.path or '/'

    def __hash__(self) -> int:
        return hash((type(self), self.path))


VaultFolder.model_rebuild()

VaultNode = Union[VaultFile, VaultFolder]
