# backend/core/loader.py

import json
import logging
import importlib
import importlib.resources
import traceback
from pathlib import Path
from typing import List, Optional

from backend.core.contracts import Container, HookManager, Plugin, PluginRegisterFunc, PluginRegistryInterface

# 在模块级别获取 logger
logger = logging.getLogger(__name__)

class PluginLoader:
    def __init__(
        self,
        container: Container,
        hook_manager: HookManager,
        registry: PluginRegistryInterface,
        package: str = "plugins"
    ):
        self._container = container
        self._hook_manager = hook_manager
        self._registry = registry
        self._package = package

    def load_plugins(self) -> List[Plugin]:
        """执行插件加载的全过程：发现、排序、注册。"""
        # 使用 print 是因为此时日志系统可能还未配置
        print("\n--- Vitrine 插件系统：开始加载 ---")

        # 阶段一：发现
        discovered = self.discover_plugins()
        if not discovered:
            print("警告：未发现任何插件。")
            print("--- Vitrine 插件系统：加载完成 ---\n")
            return []

        # 阶段二：排序
        sorted_plugins = sorted(discovered, key=lambda p: (p.priority, p.name))

        print("插件加载顺序已确定：")
        for i, plugin in enumerate(sorted_plugins):
            print(f"  {i+1}. {plugin.name} (优先级: {plugin.priority})")

        # 阶段三：注册
        self._register_plugins(sorted_plugins)

        logger.info("所有插件均已加载并注册完毕。")
        print("--- Vitrine 插件系统：加载完成 ---\n")
        return sorted_plugins

    def discover_plugins(self) -> List[Plugin]:
        """扫描插件包，读取所有子目录中的 manifest.json 文件。"""
        discovered = []
        try:
            package_path = importlib.resources.files(self._package)
        except ModuleNotFoundError:
            # 没有插件包就算了
            return discovered

        for plugin_path in package_path.iterdir():
            if not plugin_path.is_dir() or plugin_path.name.startswith(('__', '.')):
                continue

            plugin = self.read_plugin(Path(str(plugin_path)), import_path=f"{self._package}.{plugin_path.name}")
            if plugin is not None:
                discovered.append(plugin)

        return discovered

    @staticmethod
    def read_plugin(plugin_dir: Path, import_path: Optional[str] = None) -> Optional[Plugin]:
        """从一个插件目录构建 Plugin；没有或无法解析 manifest.json 时返回 None。"""
        manifest_path = plugin_dir / "manifest.json"
        if not manifest_path.is_file():
            return None

        try:
            manifest = json.loads(manifest_path.read_text(encoding='utf-8'))
        except (json.JSONDecodeError, UnicodeDecodeError, OSError):
            # 在发现阶段保持静默，只处理能成功解析的
            return None

        # 纯资源插件（没有 __init__.py）不需要导入
        if not (plugin_dir / "__init__.py").is_file():
            import_path = None

        return Plugin(
            name=manifest.get('name', plugin_dir.name),
            root=plugin_dir.resolve(),
            manifest=manifest,
            extends=dict(manifest.get('extends') or {}),
            import_path=import_path,
        )

    def _register_plugins(self, plugins: List[Plugin]):
        """按顺序登记每个插件，导入 Python 插件并调用它的注册函数。"""
        for plugin in plugins:
            self._registry.add(plugin)
            if plugin.import_path is None:
                continue

            try:
                plugin_module = importlib.import_module(plugin.import_path)

                # 模块级的 extends 覆盖 manifest 中的同名扩展点（例如懒加载的 assets）
                module_extends = getattr(plugin_module, "extends", None)
                if module_extends:
                    plugin.extends.update(module_extends)

                register_func: Optional[PluginRegisterFunc] = getattr(plugin_module, "register_plugin", None)
                if register_func is not None:
                    register_func(self._container, self._hook_manager)

            except Exception as e:
                # 只有在发生致命错误时，加载器才需要“发声”
                # 使用 print，因为它不依赖于可能出问题的日志系统
                print("\n" + "="*80)
                print(f"!!! 致命错误：加载插件 '{plugin.name}' ({plugin.import_path}) 失败 !!!")
                print("="*80)
                traceback.print_exc()
                print("="*80)
                raise RuntimeError(f"无法加载插件 {plugin.name}") from e
