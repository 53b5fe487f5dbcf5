# backend/core/contracts.py

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field

# --- 1. 核心服务接口与类型别名 (用于类型提示) ---

# 定义一个泛型，常用于 filter 钩子
T = TypeVar('T')

# 插件注册函数的标准签名
PluginRegisterFunc = Callable[['Container', 'HookManager'], None]

# 为核心服务定义接口，插件不应直接导入实现，而应依赖这些接口
class Container(ABC):
    @abstractmethod
    def register(self, name: str, factory: Callable, singleton: bool = True) -> None: raise NotImplementedError
    @abstractmethod
    def resolve(self, name: str) -> Any: raise NotImplementedError
    @abstractmethod
    def has(self, name: str) -> bool: raise NotImplementedError

class HookManager(ABC):
    @abstractmethod
    def add_implementation(self, hook_name: str, implementation: Callable, priority: int = 10, plugin_name: str = "<unknown>"): raise NotImplementedError
    @abstractmethod
    async def trigger(self, hook_name: str, **kwargs: Any) -> None: raise NotImplementedError
    @abstractmethod
    async def filter(self, hook_name: str, data: T, **kwargs: Any) -> T: raise NotImplementedError


# --- 2. 插件模型 ---

class Plugin(BaseModel):
    """
    一个已安装的插件：它自己的根目录、manifest 以及声明的扩展点。
    media_root 由 PluginRegistry 在注册时分配。
    """
    name: str
    root: Path
    manifest: Dict[str, Any] = Field(default_factory=dict)
    extends: Dict[str, Any] = Field(default_factory=dict)
    media_root: Optional[Path] = None
    import_path: Optional[str] = None

    # extends 里可能放着 callable（懒加载的 assets 生产者）
    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def priority(self) -> int:
        return self.manifest.get('priority', 100)

    @property
    def version(self) -> Optional[str]:
        return self.manifest.get('version')


# --- 3. 核心服务接口契约 ---

class PluginRegistryInterface(ABC):
    """按名称解析插件实例。取代全局的 App 单例，由容器注入。"""

    @property
    @abstractmethod
    def media_dir(self) -> Path: raise NotImplementedError

    @abstractmethod
    def add(self, plugin: Plugin) -> Plugin: raise NotImplementedError

    @abstractmethod
    def plugin(self, name: str) -> Optional[Plugin]: raise NotImplementedError

    @abstractmethod
    def plugins(self) -> List[Plugin]: raise NotImplementedError
