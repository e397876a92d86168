"""
Query data models for Advanced Random Note.

A query is a named, persisted filter plus the place its result should be
opened in. Queries are stored in the plugin settings and round-trip through
the settings file using the camelCase keys of the plugin data file.
"""

from typing import Any, Dict, List
from enum import Enum
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field, field_validator


class OpenType(Enum):
    """Where a randomly selected file is opened."""
    DEFAULT = "Default"
    ACTIVE_LEAF = "Active Leaf"
    NEW_LEAF = "New Leaf"
    NEW_WINDOW = "New Window"

    @classmethod
    def labels(cls, include_default: bool = True) -> List[str]:
        """Return the user-facing labels, optionally without 'Default'."""
        return [member.value for member in cls if include_default or member is not cls.DEFAULT]


def generate_query_id() -> str:
    """Generate a fresh, never reused query identifier."""
    return uuid4().hex


class Query(BaseModel):
    """
    A named, reusable search over the vault.

    Attributes:
        id: Stable identifier, assigned on creation and never changed
        name: User-facing label (not required to be unique)
        query: Search expression, see ``random_note.tools.query_parser``
        open_type: Where to open the selected file
        create_command: Whether the query is exposed as its own command
        use_disabled_folders: Whether global disabled folders apply
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str = Field(default_factory=generate_query_id, min_length=1, frozen=True,
                    description="Stable unique identifier")
    name: str = Field("", description="User-facing label")
    query: str = Field("", description="Search expression")
    open_type: OpenType = Field(OpenType.DEFAULT, alias="openType", description="Where to open files")
    create_command: bool = Field(False, alias="createCommand", description="Expose as a command")
    use_disabled_folders: bool = Field(True, alias="useDisabledFolders",
                                       description="Apply global disabled folders")

    @field_validator('open_type', mode='before')
    @classmethod
    def validate_open_type(cls, v) -> OpenType:
        """Validate and convert open type to enum."""
        if isinstance(v, str):
            try:
                return OpenType(v)
            except ValueError:
                raise ValueError(f"Invalid open type: {v}")
        return v

    @field_validator('query')
    @classmethod
    def validate_query(cls, v: str) -> str:
        return v.strip()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted dictionary representation."""
        data = self.model_dump(by_alias=True)
        data['openType'] = self.open_type.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Query':
        """Create a Query from its persisted dictionary representation."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        parts = [f"Query '{self.name}'"]
        if self.query:
            parts.append(f"Expression: {self.query}")
        parts.append(f"Open in: {self.open_type.value}")
        if self.create_command:
            parts.append("Command")
        return " | ".join(parts)
