# plugins/core_assets/models.py

from __future__ import annotations
from collections.abc import Mapping
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from backend.core.contracts import Plugin

# 公开 URL 前缀；与 api.py 中的资源路由保持一致
MEDIA_URL_PREFIX = "/media/plugins"


class PublishMode(str, Enum):
    """发布方式：符号链接（不支持时自动退回复制）或直接复制。"""
    SYMLINK = "symlink"
    COPY = "copy"


class PluginAsset(BaseModel):
    """
    一个插件拥有的静态文件。
    path 是它在插件命名空间内的公开路径，source_root 是磁盘上原始文件的绝对位置。
    """
    path: str
    source_root: Path
    plugin: Plugin

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @field_validator('path')
    @classmethod
    def check_relative_path(cls, v: str) -> str:
        if not v:
            raise ValueError("Asset path cannot be empty.")
        if v.startswith(('/', '\\')):
            raise ValueError(f"Asset path must be relative, got '{v}'.")

        parts = PurePosixPath(v).parts
        if '..' in parts:
            raise ValueError(f"Asset path must stay inside the plugin namespace, got '{v}'.")
        # 必须与媒体目录索引给出的写法一致，否则清理时会被当作过期文件
        if not parts or '/'.join(parts) != v:
            raise ValueError(f"Asset path must be normalized, got '{v}'.")
        return v

    def root(self) -> Path:
        return self.source_root

    def media_root(self) -> Path:
        """发布后的位置：{插件媒体目录}/{path}"""
        if self.plugin.media_root is None:
            raise ValueError(f"Plugin '{self.plugin.name}' has no media root; is it registered?")
        return self.plugin.media_root / PurePosixPath(self.path)

    def url(self) -> str:
        return f"{MEDIA_URL_PREFIX}/{self.plugin.name}/{self.path}"

    @property
    def filename(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def extension(self) -> str:
        return PurePosixPath(self.path).suffix.lstrip('.')

    def modified(self) -> Optional[int]:
        try:
            return int(self.source_root.stat().st_mtime)
        except OSError:
            return None

    def publish(self, mode: PublishMode = PublishMode.SYMLINK) -> Path:
        """让文件出现在媒体目录中。重复调用是安全的。"""
        from .filesystem import link
        return link(self.source_root, self.media_root(), mode)

    def published_root(self) -> Path:
        """已发布文件在磁盘上的真实位置（链接会被解析到源文件）。"""
        return self.media_root().resolve()


class PluginAssets(Mapping):
    """
    单个插件的资源集合：按插入顺序排列的 path -> PluginAsset 映射。
    用 factory() 构建（见 discovery.py）。
    """

    def __init__(self, assets: Optional[Dict[str, PluginAsset]] = None, plugin: Optional[Plugin] = None):
        self._data: Dict[str, PluginAsset] = {}
        self._plugin = plugin
        for path, asset in (assets or {}).items():
            self.add(path, asset)

    @classmethod
    def factory(cls, plugin: Plugin) -> "PluginAssets":
        from .discovery import discover_assets
        return discover_assets(plugin)

    @property
    def plugin(self) -> Optional[Plugin]:
        return self._plugin

    def add(self, path: str, asset: PluginAsset) -> None:
        if self._plugin is not None and asset.plugin.name != self._plugin.name:
            raise ValueError(
                f"Asset '{path}' belongs to plugin '{asset.plugin.name}', not '{self._plugin.name}'."
            )
        self._data[path] = asset

    def find(self, path: str) -> Optional[PluginAsset]:
        return self._data.get(path)

    def __getitem__(self, path: str) -> PluginAsset:
        return self._data[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        owner = self._plugin.name if self._plugin else None
        return f"PluginAssets(plugin={owner!r}, paths={list(self._data)!r})"
