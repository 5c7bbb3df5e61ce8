import logging
from typing import Any, Dict, Optional

from .cancellation import StopContext
from .config import ProviderConfig
from .errors import ProviderError
from .interfaces.resource import BaseResource
from .plugin_manager import PluginManager
from .resource_data import ResourceData
from .transport import ArmClient

logger = logging.getLogger(__name__)


class Provider:
    """
    The composition root: owns one ArmClient and hands it, together with the
    provider-wide policies, to every resource handler it builds.

    There is no global client registry; anything that needs a handler asks
    the Provider for one.
    """

    def __init__(
        self,
        config: ProviderConfig,
        client: Optional[ArmClient] = None,
        plugin_manager: Optional[PluginManager] = None,
    ):
        self.config = config
        self.client = client or ArmClient.from_config(config)
        self.plugin_manager = plugin_manager or PluginManager()
        self._resources: Dict[str, BaseResource] = {}

    def resource_types(self) -> list[str]:
        return self.plugin_manager.type_names()

    def get_plugin(self, type_name: str):
        plugin = self.plugin_manager.get_plugin(type_name)
        if plugin is None:
            raise ProviderError(
                f"Unknown resource type {type_name!r}; "
                f"available types: {', '.join(self.resource_types()) or 'none'}"
            )
        return plugin

    def get_resource(self, type_name: str) -> BaseResource:
        """Returns the lifecycle handler for a resource type, building it on first use."""
        if type_name not in self._resources:
            plugin = self.get_plugin(type_name)
            self._resources[type_name] = plugin.build_resource(self.client, self.config)
            logger.debug("Built handler for resource type %r", type_name)
        return self._resources[type_name]

    def new_resource_data(
        self,
        type_name: str,
        values: Optional[Dict[str, Any]] = None,
        resource_id: str = "",
    ) -> ResourceData:
        plugin = self.get_plugin(type_name)
        return ResourceData(plugin.get_schema(), values=values, resource_id=resource_id)

    def new_context(self) -> StopContext:
        """A StopContext bounded by the configured operation timeout."""
        return StopContext(timeout=self.config.timeout)
