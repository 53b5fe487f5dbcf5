# backend/core/registry.py
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from backend.core.contracts import Plugin, PluginRegistryInterface

logger = logging.getLogger(__name__)

class PluginRegistry(PluginRegistryInterface):
    """
    已安装插件的注册表。
    每个插件的公开媒体目录是 {media_dir}/plugins/{name}。
    """
    def __init__(self, media_dir: Union[str, Path]):
        self._media_dir = Path(media_dir).resolve()
        self._plugins: Dict[str, Plugin] = {}

    @property
    def media_dir(self) -> Path:
        return self._media_dir

    def media_root_for(self, name: str) -> Path:
        return self._media_dir / "plugins" / name

    def add(self, plugin: Plugin) -> Plugin:
        """注册一个插件，并为它分配媒体目录。"""
        if plugin.name in self._plugins:
            logger.warning(f"Overwriting plugin registration for '{plugin.name}'.")
        plugin.media_root = self.media_root_for(plugin.name)
        self._plugins[plugin.name] = plugin
        logger.debug(f"Plugin '{plugin.name}' registered. Media root: {plugin.media_root}")
        return plugin

    def plugin(self, name: str) -> Optional[Plugin]:
        """按名称查找插件；不存在时返回 None，而不是抛出异常。"""
        return self._plugins.get(name)

    def plugins(self) -> List[Plugin]:
        return list(self._plugins.values())

    def __contains__(self, name: str) -> bool:
        return name in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)
