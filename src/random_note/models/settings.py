"""
Settings data model for Advanced Random Note.

The settings object is loaded once at startup, mutated by the settings UI and
saved after every mutation. It is passed explicitly to the search engine and
the query registry; nothing in the package keeps it as ambient global state.
"""

import logging
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .query import OpenType, Query


logger = logging.getLogger(__name__)


DEFAULT_SETTINGS: Dict[str, Any] = {
    'queries': [],
    'disabledFolders': '',
    'debug': False,
    'openType': OpenType.ACTIVE_LEAF.value,
    'setActive': True,
    'defaultQuery': None,
}


class Settings(BaseModel):
    """
    Process-wide plugin configuration.

    Attributes:
        queries: Ordered list of saved queries (owned by the QueryRegistry)
        disabled_folders: Raw, newline separated folder prefixes to skip
        debug: Enables debug logging for the package
        open_type: Global open behavior used by 'Default' queries
        set_active: Whether opened files become the active view
        default_query: Id of the query run by the ribbon shortcut, if any
    """

    model_config = ConfigDict(populate_by_name=True)

    queries: List[Query] = Field(default_factory=list, description="Saved queries")
    disabled_folders: str = Field("", alias="disabledFolders", description="Disabled folder prefixes")
    debug: bool = Field(False, description="Enable debug logging")
    open_type: OpenType = Field(OpenType.ACTIVE_LEAF, alias="openType", description="Global open behavior")
    set_active: bool = Field(True, alias="setActive", description="Make opened files active")
    default_query: Optional[str] = Field(None, alias="defaultQuery", description="Default query id")

    @field_validator('open_type', mode='before')
    @classmethod
    def validate_open_type(cls, v) -> OpenType:
        """Validate the global open type; 'Default' would refer to itself."""
        if isinstance(v, str):
            try:
                v = OpenType(v)
            except ValueError:
                raise ValueError(f"Invalid open type: {v}")
        if v is OpenType.DEFAULT:
            raise ValueError("Global open type cannot be 'Default'")
        return v

    @field_validator('disabled_folders', mode='before')
    @classmethod
    def validate_disabled_folders(cls, v) -> str:
        """Accept a list of prefixes as well as raw text."""
        if v is None:
            return ''
        if isinstance(v, (list, tuple)):
            v = '\n'.join(str(item) for item in v)
        return str(v).strip()

    @field_validator('default_query', mode='before')
    @classmethod
    def validate_default_query(cls, v) -> Optional[str]:
        """
        Normalize the default query reference to an id.

        Older settings files store the whole query object, or ``false`` when
        no default is configured.
        """
        if v is None or v is False or v == '' or v == 'None':
            return None
        if isinstance(v, Query):
            return v.id
        if isinstance(v, dict):
            return v.get('id') or None
        if isinstance(v, str):
            return v
        raise ValueError(f"Invalid default query reference: {v!r}")

    @model_validator(mode='after')
    def validate_query_references(self):
        """Reject duplicate ids and drop a dangling default reference."""
        ids = [query.id for query in self.queries]
        duplicates = {query_id for query_id in ids if ids.count(query_id) > 1}
        if duplicates:
            raise ValueError(f"Duplicate query ids found: {sorted(duplicates)}")

        if self.default_query is not None and self.default_query not in ids:
            logger.warning(f"Default query {self.default_query} no longer exists, resetting to none")
            self.default_query = None
        return self

    def get_query(self, query_id: str) -> Optional[Query]:
        """Return the query with the given id, if present."""
        for query in self.queries:
            if query.id == query_id:
                return query
        return None

    def get_default_query(self) -> Optional[Query]:
        if self.default_query is None:
            return None
        return self.get_query(self.default_query)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-serializable persisted representation."""
        data = self.model_dump(by_alias=True)
        data['queries'] = [query.to_dict() for query in self.queries]
        data['openType'] = self.open_type.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Settings':
        """Create settings from a persisted dictionary, filling in defaults."""
        merged = dict(data or {})
        for name, field in cls.model_fields.items():
            key = field.alias or name
            if key not in merged and name not in merged:
                merged[key] = DEFAULT_SETTINGS[key]
        return cls.model_validate(merged)

    def __str__(self) -> str:
        parts = [f"Queries: {len(self.queries)}"]
        parts.append(f"Open in: {self.open_type.value}")
        parts.append(f"Default query: {self.default_query or 'none'}")
        parts.append(f"Debug: {self.debug}")
        return " | ".join(parts)
