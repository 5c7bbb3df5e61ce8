import importlib.metadata
import logging
from typing import Dict, Optional, cast

from .interfaces.plugin import BasePlugin

# Resource-type packages register their plugin class under this entry point group.
ENTRY_POINT_GROUP = "azurerm_provider.resources"

logger = logging.getLogger(__name__)


class PluginManager:
    """
    The registry of resource types known to the provider.

    Every installed distribution may contribute resource types by declaring a
    `BasePlugin` subclass under `ENTRY_POINT_GROUP`. A plugin is keyed by the
    resource type it manages (e.g. 'azurerm_healthcare_service'), so two
    plugins claiming the same type resolve to the one loaded last.
    """

    def __init__(self):
        self.plugins: Dict[str, BasePlugin] = {}
        self._load_plugins()

    def _load_plugins(self):
        """
        Loads each registered resource-type plugin. A plugin that fails to import
        or to report its type is skipped so the remaining types stay usable.
        """
        for entry_point in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            try:
                plugin = cast(BasePlugin, entry_point.load()())
                type_name = plugin.get_type_name()
            except Exception as e:
                logger.warning(
                    "Skipping resource type plugin '%s', it failed to load: %s",
                    entry_point.name,
                    e,
                )
                continue

            if type_name in self.plugins:
                logger.warning(
                    "Resource type '%s' is registered twice, plugin '%s' replaces the earlier one",
                    type_name,
                    entry_point.name,
                )
            self.plugins[type_name] = plugin
            logger.debug(
                "Resource type '%s' provided by plugin '%s'", type_name, entry_point.name
            )

    def get_plugin(self, type_name: str) -> Optional[BasePlugin]:
        """Returns the plugin managing `type_name`, or None for an unknown resource type."""
        return self.plugins.get(type_name)

    def type_names(self) -> list[str]:
        """The supported resource types, sorted for stable listings."""
        return sorted(self.plugins)
