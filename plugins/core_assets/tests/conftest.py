# plugins/core_assets/tests/conftest.py

import pytest
from pathlib import Path
from typing import Callable, Dict, Optional, Any

from backend.core.contracts import Plugin
from backend.core.registry import PluginRegistry
from plugins.core_assets.resolver import AssetResolver


@pytest.fixture
def media_dir(tmp_path: Path) -> Path:
    return tmp_path / "media"

@pytest.fixture
def registry(media_dir: Path) -> PluginRegistry:
    return PluginRegistry(media_dir)

@pytest.fixture
def resolver(registry: PluginRegistry) -> AssetResolver:
    return AssetResolver(registry)

@pytest.fixture
def make_plugin(tmp_path: Path, registry: PluginRegistry) -> Callable[..., Plugin]:
    """
    在临时目录中创建一个插件并注册到 registry。
    files 的键是相对插件根目录的路径，值是文件内容。
    """
    def _make_plugin(
        name: str = "demo",
        files: Optional[Dict[str, str]] = None,
        extends: Optional[Dict[str, Any]] = None
    ) -> Plugin:
        root = tmp_path / "plugins" / name
        root.mkdir(parents=True, exist_ok=True)
        for relative, content in (files or {}).items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")

        plugin = Plugin(name=name, root=root, extends=extends or {})
        return registry.add(plugin)

    return _make_plugin

@pytest.fixture
def publish(registry: PluginRegistry) -> Callable[[str, str, str], Path]:
    """直接在插件媒体目录中放一个文件，模拟之前发布过的内容。"""
    def _publish(plugin_name: str, relative: str, content: str = "old") -> Path:
        target = registry.media_root_for(plugin_name) / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target
    return _publish
