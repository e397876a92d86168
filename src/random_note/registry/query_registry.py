"""
Saved query registry for Advanced Random Note.

The registry owns the ordered query list stored in the settings. Mutations do
not talk to the host directly; each one returns the actions (register or
unregister a command, refresh the ribbon tooltip) the host has to perform to
stay in sync.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional

from ..models.query import Query
from ..models.settings import Settings


logger = logging.getLogger(__name__)

DEFAULT_PLUGIN_ID = "advanced-random-note"


class InvalidQueryReference(Exception):
    """Raised when an operation refers to a query id that is not registered."""
    pass


class ActionType(Enum):
    """Side effects the host applies after a registry mutation."""
    REGISTER_COMMAND = "register_command"
    UNREGISTER_COMMAND = "unregister_command"
    REFRESH_TOOLTIP = "refresh_tooltip"


@dataclass(frozen=True)
class RegistryAction:
    """
    A single side effect requested by the registry.

    Attributes:
        type: What to do
        query_id: Query the action is about
        command_id: Namespaced command id for command actions
        name: Command name for REGISTER_COMMAND
    """
    type: ActionType
    query_id: Optional[str] = None
    command_id: Optional[str] = None
    name: Optional[str] = None


class QueryRegistry:
    """
    Ordered collection of saved queries with stable ids.

    The registry works on ``settings.queries`` in place, so saving the
    settings after a mutation persists the change.
    """

    def __init__(self, settings: Settings, plugin_id: str = DEFAULT_PLUGIN_ID):
        """
        Initialize the registry.

        Args:
            settings: Settings whose query list backs the registry
            plugin_id: Namespace for command ids
        """
        self.settings = settings
        self.plugin_id = plugin_id

    @property
    def queries(self) -> List[Query]:
        return self.settings.queries

    def command_id(self, query_id: str) -> str:
        """Get the namespaced command id for a query."""
        return f"{self.plugin_id}:{query_id}"

    def _register(self, query: Query) -> RegistryAction:
        return RegistryAction(ActionType.REGISTER_COMMAND, query.id, self.command_id(query.id), query.name)

    def _unregister(self, query_id: str) -> RegistryAction:
        return RegistryAction(ActionType.UNREGISTER_COMMAND, query_id, self.command_id(query_id))

    def _index_of(self, query_id: str) -> Optional[int]:
        for index, query in enumerate(self.queries):
            if query.id == query_id:
                return index
        return None

    def get(self, query_id: str) -> Optional[Query]:
        """Return the query with the given id, if registered."""
        index = self._index_of(query_id)
        return None if index is None else self.queries[index]

    def add(self, query: Query) -> List[RegistryAction]:
        """
        Append a query.

        Returns:
            Actions for the host: a command registration when the query
            wants a command

        Raises:
            InvalidQueryReference: If a query with the same id is registered
        """
        if self._index_of(query.id) is not None:
            raise InvalidQueryReference(f"Query already registered: {query.id}")

        self.queries.append(query.model_copy())
        logger.info(f"Added query '{query.name}' ({query.id})")

        actions = []
        if query.create_command:
            actions.append(self._register(query))
        return actions

    def update(self, query: Query) -> List[RegistryAction]:
        """
        Replace the registered query sharing ``query.id``.

        Returns:
            Actions for the host: (un)registration when ``create_command``
            changed, re-registration when a bound query was renamed, and a
            tooltip refresh when the default query was renamed

        Raises:
            InvalidQueryReference: If no query with that id is registered
        """
        index = self._index_of(query.id)
        if index is None:
            raise InvalidQueryReference(f"Cannot update unknown query: {query.id}")

        previous = self.queries[index]
        self.queries[index] = query.model_copy()
        logger.info(f"Updated query '{query.name}' ({query.id})")

        actions = []
        if previous.create_command and not query.create_command:
            actions.append(self._unregister(query.id))
        elif query.create_command and not previous.create_command:
            actions.append(self._register(query))
        elif query.create_command and previous.name != query.name:
            actions.append(self._unregister(query.id))
            actions.append(self._register(query))

        if self.settings.default_query == query.id and previous.name != query.name:
            actions.append(RegistryAction(ActionType.REFRESH_TOOLTIP, query.id))
        return actions

    def remove(self, query_id: str) -> List[RegistryAction]:
        """
        Delete a query.

        The command binding is always released, whatever ``create_command``
        says. Removing an id that is not registered does nothing.

        Returns:
            Actions for the host
        """
        index = self._index_of(query_id)
        if index is None:
            logger.debug(f"Query {query_id} not registered, nothing to remove")
            return []

        removed = self.queries.pop(index)
        logger.info(f"Removed query '{removed.name}' ({query_id})")

        actions = [self._unregister(query_id)]
        if self.settings.default_query == query_id:
            self.settings.default_query = None
            actions.append(RegistryAction(ActionType.REFRESH_TOOLTIP, query_id))
        return actions

    def set_default(self, query_id: Optional[str]) -> List[RegistryAction]:
        """
        Select the query run by the ribbon shortcut.

        Args:
            query_id: Registered query id, or None to clear the default

        Raises:
            InvalidQueryReference: If ``query_id`` is not registered
        """
        if query_id is not None and self._index_of(query_id) is None:
            raise InvalidQueryReference(f"Cannot use unknown query as default: {query_id}")

        self.settings.default_query = query_id
        return [RegistryAction(ActionType.REFRESH_TOOLTIP, query_id)]

    def list_for_command_registration(self) -> List[Query]:
        """Return every query that should be bound to a command."""
        return [query for query in self.queries if query.create_command]

    def startup_actions(self) -> List[RegistryAction]:
        """Actions that establish all query commands at startup."""
        return [self._register(query) for query in self.list_for_command_registration()]

    def __len__(self) -> int:
        return len(self.queries)

    def __iter__(self) -> Iterator[Query]:
        return iter(list(self.queries))

    def __contains__(self, query_id: object) -> bool:
        return isinstance(query_id, str) and self._index_of(query_id) is not None
