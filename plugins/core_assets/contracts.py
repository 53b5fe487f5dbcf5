# plugins/core_assets/contracts.py

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional, Protocol, Union, runtime_checkable

from fastapi.responses import FileResponse

from backend.core.contracts import Plugin
from .models import PluginAsset, PluginAssets

# manifest 或模块 extends 中 "assets" 的取值：
#   {"css/app.css": "/abs/path/app.css"}   显式路径
#   ["/abs/path/app.css", "js/app.js"]      位置条目，路径相对插件根目录推导
DeclaredAssets = Union[Mapping[Any, str], List[str]]


@runtime_checkable
class AssetProducer(Protocol):
    """延迟给出资源清单的对象。每次发现只调用一次 resolve()。"""
    def resolve(self) -> Optional[DeclaredAssets]: ...


class AssetResolverInterface(ABC):
    """把 {plugin}/{path} 请求解析为文件响应；顺带清理过期的已发布文件。"""

    @abstractmethod
    def assets(self, plugin: Plugin) -> PluginAssets: raise NotImplementedError

    @abstractmethod
    def asset(self, plugin: Plugin, path: str) -> Optional[PluginAsset]: raise NotImplementedError

    @abstractmethod
    def clean(self, plugin_name: str) -> List[str]: raise NotImplementedError

    @abstractmethod
    def resolve(self, plugin_name: str, path: str) -> Optional[FileResponse]: raise NotImplementedError

    @abstractmethod
    def publish_all(self, plugin_name: str) -> Optional[List[PluginAsset]]: raise NotImplementedError
