"""
Plugin controller for Advanced Random Note.

This module wires the search engine to the host application. The host
provides three collaborators: a command host (commands and ribbon tooltip), a
navigator (opens files) and a query picker (the query selection dialog).
Everything here is asynchronous because those collaborators are; the search
and the random pick themselves are plain synchronous calls.
"""

import logging
import random
from typing import Awaitable, Callable, Dict, List, Optional, Protocol, Sequence

from .config.parser import SettingsStore, configure_logging
from .models.query import OpenType, Query
from .models.settings import Settings
from .models.vault import VaultFile, VaultFolder
from .registry.query_registry import ActionType, QueryRegistry, RegistryAction
from .tools.search import QueryEvaluator
from .tools.selector import get_random_element
from .tools.vault_walker import Vault


logger = logging.getLogger(__name__)

TOOLTIP_MODAL = "Open query modal"
TOOLTIP_DIRECTLY_RANDOM = "Open random note directly"

CommandCallback = Callable[[], Awaitable[None]]


class CommandHost(Protocol):
    """Host side of command registration and the ribbon icon."""

    def add_command(self, command_id: str, name: str, callback: CommandCallback) -> None: ...

    def remove_command(self, command_id: str) -> None: ...

    def set_tooltip(self, text: str) -> None: ...


class Navigator(Protocol):
    """Host side of opening files."""

    async def open_in_active_leaf(self, file: VaultFile, active: bool) -> None: ...

    async def open_in_new_leaf(self, file: VaultFile, active: bool) -> None: ...

    async def open_in_new_window(self, file: VaultFile, active: bool) -> None: ...


QueryPicker = Callable[[Sequence[Query]], Awaitable[Optional[Query]]]


def build_tooltip(settings: Settings) -> str:
    """Tooltip for the ribbon icon, naming the default query if one is set."""
    default_query = settings.get_default_query()
    if default_query is None:
        return TOOLTIP_MODAL
    return f"{TOOLTIP_DIRECTLY_RANDOM}: {default_query.name}"


class RandomNotePlugin:
    """
    Opens random files from a vault.

    The settings object is loaded once by :meth:`on_load` and saved through
    :meth:`save_settings` after every mutation.
    """

    # Open strategy per open type; 'Default' is resolved before lookup
    OPEN_STRATEGIES: Dict[OpenType, str] = {
        OpenType.ACTIVE_LEAF: 'open_in_active_leaf',
        OpenType.NEW_LEAF: 'open_in_new_leaf',
        OpenType.NEW_WINDOW: 'open_in_new_window',
    }

    def __init__(self, vault: Vault, store: SettingsStore, commands: CommandHost,
                 navigator: Navigator, query_picker: QueryPicker,
                 plugin_id: str = "advanced-random-note",
                 rng: Optional[random.Random] = None):
        """
        Initialize the plugin.

        Args:
            vault: Vault to pick files from
            store: Settings persistence
            commands: Host command registry and ribbon
            navigator: Host file opener
            query_picker: Dialog letting the user choose a query
            plugin_id: Namespace for command ids
            rng: Random generator, for reproducible picks
        """
        self.vault = vault
        self.store = store
        self.commands = commands
        self.navigator = navigator
        self.query_picker = query_picker
        self.plugin_id = plugin_id
        self.rng = rng
        self.settings = Settings()
        self.registry = QueryRegistry(self.settings, plugin_id)

    async def on_load(self) -> None:
        """Load settings and register the static and per-query commands."""
        await self.load_settings()

        self.commands.add_command(self._command_id("open-query-modal"), "Open query modal",
                                  self.handle_open_query_modal)
        self.commands.add_command(self._command_id("open-random-note"), "Open random note",
                                  self.open_random_markdown_file)
        self.commands.add_command(self._command_id("open-random-file"), "Open random file",
                                  self.open_random_vault_file)

        self.apply_actions(self.registry.startup_actions())
        self.update_tooltip()
        logger.debug(f"Loaded {self.plugin_id}")

    def _command_id(self, name: str) -> str:
        return f"{self.plugin_id}:{name}"

    async def load_settings(self) -> None:
        result = self.store.load()
        self.settings = result.settings
        self.registry = QueryRegistry(self.settings, self.plugin_id)
        configure_logging(self.settings)

    async def save_settings(self) -> None:
        self.store.save(self.settings)

    async def open_file(self, file: VaultFile, open_type: OpenType = OpenType.DEFAULT) -> None:
        """Open ``file``; 'Default' means the global open type at call time."""
        if open_type is OpenType.DEFAULT:
            open_type = self.settings.open_type
        strategy = getattr(self.navigator, self.OPEN_STRATEGIES[open_type])
        await strategy(file, self.settings.set_active)

    async def open_random_file(self, files: Sequence[VaultFile],
                               open_type: OpenType = OpenType.DEFAULT) -> Optional[VaultFile]:
        """
        Pick a random file and open it.

        Returns:
            The opened file, or None when there was nothing to pick from
        """
        file = get_random_element(files, self.rng)
        if file is None:
            return None

        logger.debug(f"Found and opened file: {file.path}")
        await self.open_file(file, open_type)
        return file

    def _evaluator(self) -> QueryEvaluator:
        return QueryEvaluator(self.settings)

    async def open_random_markdown_file(self) -> Optional[VaultFile]:
        return await self.open_random_file(self._evaluator().search_markdown(self.vault))

    async def open_random_vault_file(self) -> Optional[VaultFile]:
        return await self.open_random_file(self._evaluator().search_files(self.vault.get_files()))

    async def open_random_in_folder(self, folder: VaultFolder) -> Optional[VaultFile]:
        """Open a random file below ``folder`` (the folder context menu action)."""
        if folder.is_root():
            return None
        files = self._evaluator().search_files(folder, folder.path + "/")
        return await self.open_random_file(files)

    async def execute_query(self, query: Query) -> Optional[VaultFile]:
        """Run a saved query and open a random match."""
        files = self._evaluator().search(query, self.vault)
        if not files:
            logger.debug(f"Query '{query.name}' matched no files")
            return None
        return await self.open_random_file(files, query.open_type)

    async def handle_open_query_modal(self) -> Optional[VaultFile]:
        """Let the user choose a query, then run it."""
        query = await self.query_picker(list(self.settings.queries))
        if query is None:
            return None
        return await self.execute_query(query)

    async def handle_ribbon_click(self) -> Optional[VaultFile]:
        """Run the default query directly, or open the query dialog."""
        default_query = self.settings.get_default_query()
        if default_query is not None:
            return await self.execute_query(default_query)
        return await self.handle_open_query_modal()

    def update_tooltip(self) -> str:
        tooltip = build_tooltip(self.settings)
        self.commands.set_tooltip(tooltip)
        return tooltip

    def apply_actions(self, actions: List[RegistryAction]) -> None:
        """Perform the side effects requested by the query registry."""
        for action in actions:
            if action.type is ActionType.REGISTER_COMMAND:
                query = self.registry.get(action.query_id)
                if query is not None:
                    self.commands.add_command(action.command_id, action.name, self._query_callback(query.id))
            elif action.type is ActionType.UNREGISTER_COMMAND:
                self.commands.remove_command(action.command_id)
            elif action.type is ActionType.REFRESH_TOOLTIP:
                self.update_tooltip()

    def _query_callback(self, query_id: str) -> CommandCallback:
        # Look the query up on every call so later edits are picked up
        async def callback() -> None:
            query = self.registry.get(query_id)
            if query is not None:
                await self.execute_query(query)
        return callback

    async def add_query(self, query: Query) -> None:
        self.apply_actions(self.registry.add(query))
        await self.save_settings()

    async def update_query(self, query: Query) -> None:
        self.apply_actions(self.registry.update(query))
        await self.save_settings()

    async def remove_query(self, query_id: str) -> None:
        self.apply_actions(self.registry.remove(query_id))
        await self.save_settings()

    async def set_default_query(self, query_id: Optional[str]) -> None:
        self.apply_actions(self.registry.set_default(query_id))
        await self.save_settings()
