# plugins/core_assets/resolver.py

import logging
from pathlib import PurePosixPath
from typing import List, Optional

from fastapi.responses import FileResponse

from backend.core.contracts import Plugin, PluginRegistryInterface
from . import filesystem
from .contracts import AssetResolverInterface
from .models import PluginAsset, PluginAssets, PublishMode

logger = logging.getLogger(__name__)


class AssetResolver(AssetResolverInterface):
    """
    插件资源会被自动链接（或复制）到媒体目录中以便公开访问。
    每次解析请求都会先做一次清理，删除已不再声明的旧文件，然后发布被请求的资源。

    注册表通过构造函数注入，而不是从全局单例读取。
    """

    def __init__(self, registry: PluginRegistryInterface, mode: PublishMode = PublishMode.SYMLINK):
        self._registry = registry
        self._mode = mode

    @property
    def mode(self) -> PublishMode:
        return self._mode

    def assets(self, plugin: Plugin) -> PluginAssets:
        return PluginAssets.factory(plugin)

    def asset(self, plugin: Plugin, path: str) -> Optional[PluginAsset]:
        return self.assets(plugin).find(path)

    def clean(self, plugin_name: str) -> List[str]:
        """
        删除媒体目录中已过期的文件：把目录里现有的条目与当前资源路径做差集。
        仍然包含当前资源的父目录会被保留。删除失败时 OSError 会直接向上抛出。

        返回被删除的相对路径列表；插件不存在时什么也不做。
        """
        plugin = self._registry.plugin(plugin_name)
        if plugin is None:
            return []

        media = plugin.media_root
        current = set(self.assets(plugin).keys())
        parents = {str(parent) for path in current for parent in PurePosixPath(path).parents if str(parent) != '.'}

        stale = [entry for entry in filesystem.index(media, recursive=True) if entry not in current]

        removed: List[str] = []
        for entry in stale:
            root = media / entry

            if not (root.exists() or root.is_symlink()):
                # 已随过期的父目录一起删除
                continue

            if filesystem.is_file(root) or root.is_symlink():
                filesystem.remove_file(root)
            elif entry in parents:
                continue
            else:
                filesystem.remove_dir(root)

            removed.append(entry)
            logger.info(f"Removed stale asset '{entry}' of plugin '{plugin_name}'.")

        return removed

    def resolve(self, plugin_name: str, path: str) -> Optional[FileResponse]:
        """
        发布并返回一个插件资源的文件响应。
        插件或资源不存在时返回 None，由调用方（路由层）转换为 404。
        """
        plugin = self._registry.plugin(plugin_name)
        if plugin is None:
            return None

        # 每次解析都顺便做一次清理
        self.clean(plugin_name)

        asset = self.asset(plugin, path)
        if asset is None:
            return None

        asset.publish(self._mode)
        logger.debug(f"Published asset '{path}' of plugin '{plugin_name}' to {asset.media_root()}.")

        return FileResponse(asset.published_root())

    def publish_all(self, plugin_name: str) -> Optional[List[PluginAsset]]:
        """清理后发布插件的全部资源。插件不存在时返回 None。"""
        plugin = self._registry.plugin(plugin_name)
        if plugin is None:
            return None

        self.clean(plugin_name)

        published = []
        for asset in self.assets(plugin).values():
            asset.publish(self._mode)
            published.append(asset)

        logger.info(f"Published {len(published)} assets of plugin '{plugin_name}'.")
        return published
